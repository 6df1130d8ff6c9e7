"""
Standard Cards - The built-in demo card pool.

A small, self-contained pool that exercises every implemented effect:
the ride line draws for the player who went second, the Energy Generator
crest charges energy and pays for an Energy-Blast draw.

Card structure follows the card database format (see card_schema):
- Grade, power, critical, shield
- Skills (Boost, Intercept, Twin Drive, Sentinel)
- Trigger icon on grade 0 main deck cards
- Implemented effects naming effect library indices
"""

from __future__ import annotations

from ...card_schema.records import CardRecord, CREST_TYPE, effect_from_dict
from ...engine_core.state import TriggerKind

NATION = "Demo Empire"

# Condition: the player went second
WENT_SECOND = ["player.index", "===", 1]

DRAW_IF_SECOND = effect_from_dict({
    "trigger": "on_ride",
    "function_index": 0,
    "zone": "board",
    "condition": WENT_SECOND,
    "mandatory": True,
    "description": "When this unit rides as vanguard, if you went second, draw a card",
})


def _unit(card_id, name, grade, power, shield, skills=None, trigger=None, critical=1, effects=None):
    return CardRecord(
        id=card_id,
        name=name,
        grade=grade,
        power=power,
        critical=critical,
        shield=shield,
        skills=skills or [],
        trigger=trigger,
        effects=effects or [],
        nation=NATION,
    )


# ============================================================================
# Ride Deck
# ============================================================================

STARTING_SQUIRE = _unit("DEMO/001", "Starting Squire", 0, 6000, 10000, ["Boost"], effects=[DRAW_IF_SECOND])
CADET_OF_DAWN = _unit("DEMO/002", "Cadet of Dawn", 1, 8000, 5000, ["Boost"], effects=[DRAW_IF_SECOND])
KNIGHT_OF_NOON = _unit("DEMO/003", "Knight of Noon", 2, 10000, 5000, ["Intercept"], effects=[DRAW_IF_SECOND])
SOVEREIGN_OF_DUSK = _unit("DEMO/004", "Sovereign of Dusk", 3, 13000, None, ["Twin Drive"])

ENERGY_GENERATOR = CardRecord(
    id="DEMO/CREST",
    name="Energy Generator",
    shield=None,
    card_type=CREST_TYPE,
    nation=NATION,
    effects=[
        effect_from_dict({
            "trigger": "on_ride",
            "function_index": 1,
            "zone": "rideDeck",
            "mandatory": True,
            "description": "When you ride, put this card into the crest zone; if you went second, Energy-Charge 3",
        }),
        effect_from_dict({
            "trigger": "on_ride_phase_start",
            "function_index": 2,
            "zone": "crestZone",
            "mandatory": True,
            "description": "At the beginning of your ride phase, Energy-Charge 3",
        }),
        effect_from_dict({
            "trigger": "act",
            "function_index": 3,
            "zone": "crestZone",
            "is_act": True,
            "once_per_turn": True,
            "cost": {"energy": 7},
            "condition": ["player.energy", ">=", 7],
            "description": "Energy-Blast 7: draw a card",
        }),
    ],
)

RIDE_DECK_CARDS = [STARTING_SQUIRE, CADET_OF_DAWN, KNIGHT_OF_NOON, SOVEREIGN_OF_DUSK, ENERGY_GENERATOR]


# ============================================================================
# Main Deck
# ============================================================================

# Triggers (grade 0)
MEDIC_OF_DAWN = _unit("DEMO/010", "Medic of Dawn", 0, 5000, 20000, trigger=TriggerKind.HEAL)
LANCER_OF_DAWN = _unit("DEMO/011", "Lancer of Dawn", 0, 5000, 15000, trigger=TriggerKind.CRITICAL)
ARCHER_OF_DAWN = _unit("DEMO/012", "Archer of Dawn", 0, 5000, 15000, trigger=TriggerKind.CRITICAL)
SCOUT_OF_DAWN = _unit("DEMO/013", "Scout of Dawn", 0, 5000, 10000, trigger=TriggerKind.DRAW)
HERALD_OF_DAWN = _unit("DEMO/014", "Herald of Dawn", 0, 5000, 15000, trigger=TriggerKind.FRONT)

# Grade 1
SHIELD_MAIDEN = _unit("DEMO/020", "Shield Maiden", 1, 6000, 0, ["Boost", "Sentinel"])
SQUIRE_OF_EMBERS = _unit("DEMO/021", "Squire of Embers", 1, 8000, 5000, ["Boost"])
SQUIRE_OF_TIDES = _unit("DEMO/022", "Squire of Tides", 1, 8000, 5000, ["Boost"])
SQUIRE_OF_GALES = _unit("DEMO/023", "Squire of Gales", 1, 7000, 10000, ["Boost"])

# Grade 2
KNIGHT_OF_EMBERS = _unit("DEMO/030", "Knight of Embers", 2, 10000, 5000, ["Intercept"])
KNIGHT_OF_TIDES = _unit("DEMO/031", "Knight of Tides", 2, 10000, 5000, ["Intercept"])
KNIGHT_OF_GALES = _unit("DEMO/032", "Knight of Gales", 2, 11000, 5000, ["Intercept"])

# Grade 3
WARLORD_OF_EMBERS = _unit("DEMO/040", "Warlord of Embers", 3, 13000, None, ["Twin Drive"])
WARLORD_OF_TIDES = _unit("DEMO/041", "Warlord of Tides", 3, 13000, None, ["Twin Drive"])

# (card, copies) in the demo main deck
MAIN_DECK_LIST = [
    (MEDIC_OF_DAWN, 4),
    (LANCER_OF_DAWN, 4),
    (ARCHER_OF_DAWN, 4),
    (SCOUT_OF_DAWN, 2),
    (HERALD_OF_DAWN, 2),
    (SHIELD_MAIDEN, 4),
    (SQUIRE_OF_EMBERS, 4),
    (SQUIRE_OF_TIDES, 4),
    (SQUIRE_OF_GALES, 4),
    (KNIGHT_OF_EMBERS, 4),
    (KNIGHT_OF_TIDES, 4),
    (KNIGHT_OF_GALES, 4),
    (WARLORD_OF_EMBERS, 4),
    (WARLORD_OF_TIDES, 2),
]

STANDARD_CARDS = RIDE_DECK_CARDS + [card for card, _ in MAIN_DECK_LIST]


def get_card_by_id(card_id: str) -> CardRecord | None:
    """Get a card record by id."""
    for card in STANDARD_CARDS:
        if card.id == card_id:
            return card
    return None
