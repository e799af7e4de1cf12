"""
Card and deck construction for KARGO.

A deck is an immutable tuple of cards used as a stack: the top of the deck
is the last element, so drawing pops from the end.

Shuffling uses Fisher-Yates, walking from the last index down to 1 and
swapping each position with a uniformly chosen index in [0, i]. The random
source is injected so that tests and replays can reproduce a deal exactly.
"""

import random

from pydantic import BaseModel, ConfigDict

from kargo.logic.enums import Rank, Suit

DECK_SIZE = 52
SUIT_ORDER = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)
RANK_ORDER = tuple(Rank)


class Card(BaseModel):
    """A single playing card. `id` is unique within one deck instance."""

    model_config = ConfigDict(frozen=True)

    id: str
    suit: Suit
    rank: Rank


def build_deck() -> tuple[Card, ...]:
    """Build the full 52-card deck in suit-major order (ids c_0 .. c_51)."""
    cards = []
    for suit in SUIT_ORDER:
        for rank in RANK_ORDER:
            cards.append(Card(id=f"c_{len(cards)}", suit=suit, rank=rank))
    return tuple(cards)


def shuffle_deck(deck: tuple[Card, ...] | list[Card], rng: random.Random) -> tuple[Card, ...]:
    """Return a Fisher-Yates permutation of `deck` without mutating it."""
    result = list(deck)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return tuple(result)


def create_rng(seed: int | str | None = None) -> random.Random:
    """Create a random source for shuffling. A seed makes the deal reproducible."""
    if seed is None:
        return random.Random()  # noqa: S311
    return random.Random(seed)  # noqa: S311
