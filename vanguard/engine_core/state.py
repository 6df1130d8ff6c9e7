"""
Game State - Cards, circles, boards and the complete match state.

Design principles:
- Passive data: no rules logic beyond structural accessors
- Copy-on-write: the reducer clones before it mutates anything
- Acyclic: battle records reference circles by name, never by object
- Replayable: the match RNG lives inside the state and clones with it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
from enum import Enum
import logging
import random

logger = logging.getLogger(__name__)

DAMAGE_TO_LOSE = 6
STARTING_HAND_SIZE = 5
FRONT_ROW = ("R1", "V", "R2")
BACK_ROW = ("R3", "R4", "R5")
BOOSTER_FOR = {"R1": "R3", "V": "R4", "R2": "R5"}
MOVE_COLUMNS = (("R1", "R3"), ("R2", "R5"))


class Phase(Enum):
    """Turn phases, plus the effect_resolution sub-phase."""
    SETUP = "setup"
    MULLIGAN = "mulligan"
    STAND = "stand"
    DRAW = "draw"
    RIDE = "ride"
    MAIN = "main"
    BATTLE = "battle"
    GUARD = "guard"
    DRIVE_CHECK = "drive_check"
    CLOSE_STEP = "close_step"
    END = "end"
    EFFECT_RESOLUTION = "effect_resolution"


class TriggerKind(Enum):
    """Trigger icons printed on main deck cards."""
    HEAL = "Heal"
    CRITICAL = "Critical"
    DRAW = "Draw"
    FRONT = "Front"


class CardZone(Enum):
    """Zone tags used by effect zone restrictions."""
    BOARD = "board"
    RIDE_DECK = "rideDeck"
    CREST = "crestZone"
    SOUL = "soul"
    HAND = "hand"
    DROP = "drop"
    DAMAGE = "damage"


class EventType(Enum):
    """Game events that card effects can listen to."""
    ON_RIDE = "ON_RIDE"
    ON_RIDE_PHASE_START = "ON_RIDE_PHASE_START"
    ON_CALL = "ON_CALL"
    ON_ATTACK = "ON_ATTACK"

    @property
    def trigger_name(self) -> str:
        """Name used in effect definitions, e.g. 'on_ride'."""
        return self.value.lower()


@dataclass
class EffectCost:
    """Resources paid to activate an effect."""
    energy: int = 0


@dataclass
class EffectDefinition:
    """
    One implemented effect printed on a card.

    The behavior itself lives in the effect registry under function_index;
    this record only says when it fires and whether the player may decline.
    """
    trigger: str  # e.g. "on_ride", "on_ride_phase_start", "act"
    function_index: int
    zone: str | None = None  # CardZone value the card must be in
    condition: Any = None  # raw nested lists or a parsed condition
    mandatory: bool = True
    is_act: bool = False
    once_per_turn: bool = False
    cost: EffectCost = field(default_factory=EffectCost)
    description: str = ""


def drive_for_skills(skills: list[str]) -> int:
    """Drive check count implied by drive-tier skill tags."""
    if "Triple Drive" in skills:
        return 3
    if "Twin Drive" in skills:
        return 2
    return 1


@dataclass
class Card:
    """
    A physical card instance.

    `id` is the definition id shared by copies of the same card;
    `unique_id` identifies this copy for the whole match.
    """
    unique_id: str
    id: str
    name: str
    grade: int | None = None
    power: int | None = None
    critical: int = 1
    shield: int | None = 0
    skills: list[str] = field(default_factory=list)
    trigger: TriggerKind | None = None
    effects: list[EffectDefinition] = field(default_factory=list)

    # Runtime flags
    is_resting: bool = False
    bonus_power: int = 0
    bonus_critical: int = 0
    is_public: bool = False
    drive: int | None = None

    def __post_init__(self):
        if self.power is None:
            self.drive = 0
        elif self.drive is None:
            self.drive = drive_for_skills(self.skills)

    def __hash__(self):
        return hash(self.unique_id)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.unique_id == other.unique_id

    @property
    def is_unit(self) -> bool:
        return self.power is not None

    @property
    def total_power(self) -> int:
        return (self.power or 0) + self.bonus_power

    @property
    def total_critical(self) -> int:
        return self.critical + self.bonus_critical

    def has_skill(self, skill: str) -> bool:
        return skill in self.skills

    def reset_bonuses(self):
        """Clear until-end-of-turn modifiers."""
        self.bonus_power = 0
        self.bonus_critical = 0

    def reset_transient(self):
        """Clear everything that should not survive a return to the deck."""
        self.is_resting = False
        self.is_public = False
        self.reset_bonuses()

    def label(self) -> str:
        grade = "-" if self.grade is None else self.grade
        return f"[G{grade}] {self.name}"


class UnknownCircleError(LookupError):
    """Raised when a circle name is not one of the six board circles."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown circle: {name}")


@dataclass
class Circle:
    """A board position holding at most one unit."""
    name: str
    row: str  # "front" or "back"
    unit: Card | None = None

    @property
    def is_empty(self) -> bool:
        return self.unit is None


@dataclass
class Board:
    """The six circles of one player."""
    circles: dict[str, Circle] = field(default_factory=dict)

    def __post_init__(self):
        if not self.circles:
            self.circles = {name: Circle(name, "front") for name in FRONT_ROW}
            self.circles.update({name: Circle(name, "back") for name in BACK_ROW})

    @classmethod
    def with_vanguard(cls, vanguard: Card | None) -> Board:
        board = cls()
        board.circles["V"].unit = vanguard
        return board

    def get_circle(self, name: str) -> Circle:
        """Look up a circle, failing loudly for unknown names."""
        circle = self.circles.get(name)
        if circle is None:
            raise UnknownCircleError(name)
        return circle

    @property
    def front_row(self) -> list[Circle]:
        return [self.circles[name] for name in FRONT_ROW]

    @property
    def back_row(self) -> list[Circle]:
        return [self.circles[name] for name in BACK_ROW]

    @property
    def vanguard(self) -> Card | None:
        return self.circles["V"].unit

    @property
    def rear_circles(self) -> list[Circle]:
        return [c for c in self.front_row + self.back_row if c.name != "V"]

    def units(self) -> list[Card]:
        """Units in board order: front row then back row."""
        return [c.unit for c in self.front_row + self.back_row if c.unit]

    def booster_circle_for(self, name: str) -> Circle | None:
        back = BOOSTER_FOR.get(name)
        return self.circles[back] if back else None

    def find_unit(self, unique_id: str) -> Circle | None:
        for circle in self.circles.values():
            if circle.unit and circle.unit.unique_id == unique_id:
                return circle
        return None


@dataclass
class PlayerState:
    """
    State for one player.

    The deck top is the END of the list. The ride deck is kept in
    ascending grade order with the starting grade 0 already removed.
    """
    deck: list[Card] = field(default_factory=list)
    ride_deck: list[Card] = field(default_factory=list)
    board: Board = field(default_factory=Board)

    hand: list[Card] = field(default_factory=list)
    drop: list[Card] = field(default_factory=list)
    damage: list[Card] = field(default_factory=list)
    soul: list[Card] = field(default_factory=list)
    g_zone: list[Card] = field(default_factory=list)
    bind: list[Card] = field(default_factory=list)
    guardian: list[Card] = field(default_factory=list)
    trigger: list[Card] = field(default_factory=list)
    crest: list[Card] = field(default_factory=list)
    order: list[Card] = field(default_factory=list)

    energy: int = 0
    max_energy: int = 3
    continuous_effects: list[str] = field(default_factory=list)
    used_turnly_effects: list[int] = field(default_factory=list)
    decked_out: bool = False

    @classmethod
    def from_decks(cls, ride_deck: list[Card], main_deck: list[Card]) -> PlayerState:
        """Build a player from a grade-sorted ride deck and a main deck."""
        ride = sorted(ride_deck, key=lambda c: 99 if c.grade is None else c.grade)
        starting_vanguard = ride.pop(0) if ride else None
        return cls(
            deck=list(main_deck),
            ride_deck=ride,
            board=Board.with_vanguard(starting_vanguard),
        )

    @property
    def vanguard(self) -> Card | None:
        return self.board.vanguard

    def all_cards(self) -> list[Card]:
        """Every card this player owns, wherever it is."""
        cards: list[Card] = []
        for zone in (
            self.deck, self.ride_deck, self.hand, self.drop, self.damage,
            self.soul, self.g_zone, self.bind, self.guardian, self.trigger,
            self.crest, self.order,
        ):
            cards.extend(zone)
        cards.extend(self.board.units())
        return cards

    def energy_charge(self, amount: int):
        self.energy = min(self.energy + amount, self.max_energy)


@dataclass
class BattleRecord:
    """The attack in progress, kept between guard, drive check and close step."""
    attacker_circle: str
    target_circle: str
    attacker_power: int
    boosted: bool = False


@dataclass
class PendingEffect:
    """A triggered effect waiting to be resolved for an event."""
    card_name: str
    card_id: str
    effect: EffectDefinition
    event_payload: Any = None


@dataclass
class Event:
    """
    A queued game event.

    pending_effects stays None until the resolver collects the
    effects that respond to this event.
    """
    event_type: EventType
    payload: Any = None
    pending_effects: list[PendingEffect] | None = None


@dataclass
class GameState:
    """
    Complete match state at a point in time.

    Helper methods that change the state (draw, shuffle_deck, next_turn...)
    mutate in place; the reducer only ever calls them on its own clone.
    """
    players: list[PlayerState] = field(default_factory=list)
    turn: int = 0
    current_player_index: int = 0
    phase: Phase = Phase.SETUP

    current_battle: BattleRecord | None = None
    event_queue: list[Event] = field(default_factory=list)
    next_phase: Phase | None = None

    # Random seed for determinism
    random_seed: int | None = None
    random_state: random.Random | None = None

    # History (for replay, logging)
    history: list[Any] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def rng(self) -> random.Random:
        if self.random_state is None:
            self.random_state = random.Random(self.random_seed)
        return self.random_state

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    @property
    def opponent_index(self) -> int:
        return 1 - self.current_player_index

    @property
    def opponent(self) -> PlayerState:
        return self.players[self.opponent_index]

    @property
    def acting_player_index(self) -> int:
        """Who decides next: the defender during the guard step."""
        if self.phase == Phase.GUARD:
            return self.opponent_index
        return self.current_player_index

    def is_game_over(self) -> bool:
        return self.winner() is not None

    def winner(self) -> int | None:
        """Index of the winning player, or None while the match is live."""
        for index, player in enumerate(self.players):
            if len(player.damage) >= DAMAGE_TO_LOSE or player.decked_out:
                return 1 - index
        return None

    # ------------------------------------------------------------------
    # In-place helpers
    # ------------------------------------------------------------------

    def draw(self, player_index: int, count: int = 1) -> list[Card]:
        """Move cards from the top of a deck to hand."""
        player = self.players[player_index]
        drawn = []
        for _ in range(count):
            if not player.deck:
                logger.warning(f"Player {player_index + 1} tried to draw from an empty deck")
                break
            card = player.deck.pop()
            player.hand.append(card)
            drawn.append(card)
        return drawn

    def shuffle_deck(self, player_index: int):
        self.rng.shuffle(self.players[player_index].deck)

    def start_game(self):
        """Shuffle both decks, deal opening hands and enter the mulligan."""
        self.turn = 1
        self.current_player_index = 0
        self.phase = Phase.MULLIGAN
        for index in range(len(self.players)):
            self.shuffle_deck(index)
            self.draw(index, STARTING_HAND_SIZE)

    def next_turn(self):
        self.turn += 1
        # Once-per-turn usage resets when the second player finishes
        if self.current_player_index == 1:
            for player in self.players:
                player.used_turnly_effects = []

    def switch_player(self):
        self.current_player_index = 1 - self.current_player_index

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
