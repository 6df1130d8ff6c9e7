"""
Determinizer - Samples one plausible full-information state.

The searching player cannot see the opponent's non-public hand cards or
the order of the opponent's deck. For each search iteration those cards
are pooled, checked against the deck construction constraints and dealt
back out at random:

- Known cards: public hand cards, board units, drop, damage and soul
- Unknown pool: opponent deck + non-public hand cards
- Required in the pool: 16 triggers, 4 heals, 4 sentinels, each less
  the number already known

Card identity is preserved: the pool is reshuffled, never invented, so
every card the opponent owns is still in exactly one zone afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.state import GameState, Card, TriggerKind

logger = logging.getLogger(__name__)

REQUIRED_TRIGGERS = 16
REQUIRED_HEALS = 4
REQUIRED_SENTINELS = 4


def is_heal(card: Card) -> bool:
    return card.trigger == TriggerKind.HEAL


def is_sentinel(card: Card) -> bool:
    return card.has_skill("Sentinel")


@dataclass
class PoolBreakdown:
    """Unknown pool split into the constrained categories."""
    heals: list[Card] = field(default_factory=list)
    other_triggers: list[Card] = field(default_factory=list)
    sentinels: list[Card] = field(default_factory=list)  # non-trigger sentinels
    plain: list[Card] = field(default_factory=list)

    @classmethod
    def from_cards(cls, cards: list[Card]) -> PoolBreakdown:
        breakdown = cls()
        for card in cards:
            if is_heal(card):
                breakdown.heals.append(card)
            elif card.trigger is not None:
                breakdown.other_triggers.append(card)
            elif is_sentinel(card):
                breakdown.sentinels.append(card)
            else:
                breakdown.plain.append(card)
        return breakdown

    @property
    def triggers(self) -> int:
        return len(self.heals) + len(self.other_triggers)


@dataclass
class Determinizer:
    """Deals the hidden information of one player at random."""
    required_triggers: int = REQUIRED_TRIGGERS
    required_heals: int = REQUIRED_HEALS
    required_sentinels: int = REQUIRED_SENTINELS

    def determinize(
        self,
        state: GameState,
        searcher_index: int,
        rng: random.Random | None = None,
    ) -> GameState:
        """
        Return a copy of state with the hidden cards of the other player
        redealt. The input state is not modified.
        """
        rng = rng or random.Random()
        det = state.clone()
        hidden_index = 1 - searcher_index
        player = det.players[hidden_index]

        public_hand = [c for c in player.hand if c.is_public]
        unknown_pool = list(player.deck) + [c for c in player.hand if not c.is_public]
        hand_size = len(player.hand)

        known = public_hand + player.board.units() + player.drop + player.damage + player.soul
        known_triggers = sum(1 for c in known if c.trigger is not None)
        known_heals = sum(1 for c in known if is_heal(c))
        known_sentinels = sum(1 for c in known if is_sentinel(c))

        required_triggers = max(0, self.required_triggers - known_triggers)
        required_heals = max(0, self.required_heals - known_heals)
        required_sentinels = max(0, self.required_sentinels - known_sentinels)

        breakdown = PoolBreakdown.from_cards(unknown_pool)
        if len(breakdown.heals) < required_heals:
            logger.warning(
                f"Determinization short of heals: need {required_heals}, pool has {len(breakdown.heals)}"
            )
        if breakdown.triggers < required_triggers:
            logger.warning(
                f"Determinization short of triggers: need {required_triggers}, pool has {breakdown.triggers}"
            )
        if len(breakdown.sentinels) < required_sentinels:
            logger.warning(
                f"Determinization short of sentinels: need {required_sentinels}, pool has {len(breakdown.sentinels)}"
            )

        merged = breakdown.heals + breakdown.other_triggers + breakdown.sentinels + breakdown.plain
        rng.shuffle(merged)

        new_hand = list(public_hand)
        while len(new_hand) < hand_size and merged:
            new_hand.append(merged.pop())

        player.hand = new_hand
        player.deck = merged
        return det
