"""
Effects - Registry of card effect procedures.

Card data only names an effect by its integer function index; the
procedures themselves are registered here and looked up at resolution time.
"""

from .registry import EffectRegistry, EffectFn, default_registry
from .library import (
    ENERGY_GENERATOR_NAME,
    MAX_ENERGY_10,
    on_ride_if_second_draw,
    on_ride_energy_crest,
    on_ride_phase_start_energy_charge,
    act_energy_blast_draw,
)

__all__ = [
    "EffectRegistry",
    "EffectFn",
    "default_registry",
    "ENERGY_GENERATOR_NAME",
    "MAX_ENERGY_10",
    "on_ride_if_second_draw",
    "on_ride_energy_crest",
    "on_ride_phase_start_energy_charge",
    "act_energy_blast_draw",
]
