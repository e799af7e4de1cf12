"""
Immutable game state models for KARGO.

Every model is a frozen Pydantic model holding tuples instead of lists, so a
GameState value can never change after construction. Transitions build a new
value with model_copy(update=...) and the owning Room swaps it in wholesale.
"""

from pydantic import BaseModel, ConfigDict, Field

from kargo.logic.deck import Card
from kargo.logic.enums import GamePhase, TurnStep

HAND_SIZE = 4
MIN_PLAYERS_TO_START = 2


class Player(BaseModel):
    """
    A seated player. `id` is the persistent session identity, never the
    transient connection id.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    ready: bool = False
    hand: tuple[Card, ...] = ()
    kargo_called: bool = False

    def has_card(self, card_id: str) -> bool:
        return any(card.id == card_id for card in self.hand)

    def card_index(self, card_id: str) -> int | None:
        for index, card in enumerate(self.hand):
            if card.id == card_id:
                return index
        return None


class GameState(BaseModel):
    """
    Authoritative state of one room's game.

    Invariants:
    - turn_player_id == players[turn_index].id whenever phase is TURN
    - drawn_card is set only while turn_step is PLAY
    - once started, deck + hands + discard + drawn_card hold exactly 52 cards
    """

    model_config = ConfigDict(frozen=True)

    phase: GamePhase = GamePhase.LOBBY
    players: tuple[Player, ...] = ()
    deck: tuple[Card, ...] = ()
    discard: tuple[Card, ...] = ()  # last element is the top of the pile
    drawn_card: Card | None = None
    turn_player_id: str | None = None
    turn_index: int = 0
    turn_step: TurnStep = TurnStep.DRAW

    def get_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int | None:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None

    @property
    def top_discard(self) -> Card | None:
        return self.discard[-1] if self.discard else None

    @property
    def all_ready(self) -> bool:
        """Check if enough players are seated and every one of them is ready."""
        return len(self.players) >= MIN_PLAYERS_TO_START and all(p.ready for p in self.players)

    def card_count(self) -> int:
        """Count every card in the room: deck, hands, discard and drawn slot."""
        in_hands = sum(len(p.hand) for p in self.players)
        drawn = 1 if self.drawn_card is not None else 0
        return len(self.deck) + in_hands + len(self.discard) + drawn


class GameAction(BaseModel):
    """
    A player's intent. `kind` stays a plain string so unknown kinds reach the
    validator and are reported as unknown_action rather than failing to parse.
    """

    model_config = ConfigDict(frozen=True)

    kind: str = Field(min_length=1, max_length=50)
    card_id: str | None = Field(default=None, max_length=50)
    target_card_id: str | None = Field(default=None, max_length=50)
