#!/usr/bin/env python3
"""
Ideation Workshop - Card Selection Builder

Accumulates a multi-card selection per combination category during
ideation and turns it into a CardCombination on save.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .catalog import make_custom_card
from .models import (
    COMBINATION_CATEGORIES,
    Card,
    CardCategory,
    CardCombination,
)

if TYPE_CHECKING:
    from .catalog import CardCatalog


class SelectionError(ValueError):
    """Raised on misuse of the selection builder."""


@dataclass
class CustomCardRequest:
    """Pending custom-card authoring for a category."""
    category: CardCategory
    placeholder: Card


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class CardSelection:
    """
    Selection state for the ideation view.

    Pass the idea's current combination as original to edit it; saving
    is then blocked until the combination differs.
    """

    def __init__(
        self,
        catalog: "CardCatalog",
        original: Optional[CardCombination] = None,
        description: str = "",
        clock: Callable[[], int] = _epoch_ms,
    ):
        self._catalog = catalog
        self._original = original
        self._clock = clock
        self._issued_ids: set = set()
        self.description = description
        self.pending_custom: Optional[CustomCardRequest] = None
        self._selected: Dict[CardCategory, List[Card]] = {
            category: list(original.cards(category)) if original else []
            for category in COMBINATION_CATEGORIES
        }

    @property
    def is_editing(self) -> bool:
        return self._original is not None

    def selected(self, category: CardCategory) -> List[Card]:
        return list(self._selected[category])

    def is_selected(self, category: CardCategory, card_id: str) -> bool:
        return any(card.id == card_id for card in self._selected[category])

    def has_cards(self) -> bool:
        return any(self._selected[category] for category in COMBINATION_CATEGORIES)

    # --- Selection ---

    def toggle(self, category: CardCategory, card: Card) -> Optional[CustomCardRequest]:
        """
        Toggle a card in its category.

        Selecting a custom placeholder starts the authoring flow instead
        and returns the request; nothing is selected until complete_custom().
        """
        if not category.is_combination:
            raise SelectionError(f"{category.label} cards are not part of a combination")

        if self._catalog.is_custom_placeholder(card.id):
            self.pending_custom = CustomCardRequest(category=category, placeholder=card)
            return self.pending_custom

        cards = self._selected[category]
        if self.is_selected(category, card.id):
            self._selected[category] = [c for c in cards if c.id != card.id]
        else:
            cards.append(card)
        return None

    def remove(self, category: CardCategory, card_id: str) -> None:
        self._selected[category] = [c for c in self._selected[category] if c.id != card_id]

    def complete_custom(self, name: str, description: str) -> Card:
        """Finish the pending custom card and add it to its category."""
        if self.pending_custom is None:
            raise SelectionError("No custom card is being authored")
        if not name.strip():
            raise SelectionError("A custom card needs a name")

        category = self.pending_custom.category
        card = make_custom_card(category, self._next_custom_id(category), name.strip(), description.strip())
        self._selected[category].append(card)
        self.pending_custom = None
        return card

    def cancel_custom(self) -> None:
        self.pending_custom = None

    def _next_custom_id(self, category: CardCategory) -> str:
        taken = self._issued_ids | {
            card.id for cards in self._selected.values() for card in cards
        }
        stamp = self._clock()
        card_id = f"custom-{category.value}-{stamp}"
        while card_id in taken:
            stamp += 1
            card_id = f"custom-{category.value}-{stamp}"
        self._issued_ids.add(card_id)
        return card_id

    # --- Save gating ---

    def is_changed(self) -> bool:
        """Whether the selection differs from the original combination."""
        if self._original is None:
            return True
        for category in COMBINATION_CATEGORIES:
            before = {card.id: card for card in self._original.cards(category)}
            after = {card.id: card for card in self._selected[category]}
            if set(before) != set(after):
                return True
            for card_id, card in after.items():
                if card.is_custom and (
                    card.name != before[card_id].name
                    or card.description != before[card_id].description
                ):
                    return True
        return False

    def can_save(self) -> bool:
        if not self.has_cards() or not self.description.strip():
            return False
        if self.is_editing and not self.is_changed():
            return False
        return True

    def build(self) -> CardCombination:
        """Combination with each category's primary slot set to its first card."""
        combination = CardCombination()
        for category in COMBINATION_CATEGORIES:
            combination.set_cards(category, self._selected[category])
        return combination

    # --- Naming ---

    def suggested_title(self, existing_ideas: int = 0) -> str:
        """
        Title derived from the first thing and sensor.

        Falls back to "New Idea <n>" numbered after the existing ideas.
        """
        things = self._selected[CardCategory.THING]
        sensors = self._selected[CardCategory.SENSOR]
        if things and sensors:
            return f"{things[0].name} with {sensors[0].name}"
        if things:
            return things[0].name
        if sensors:
            return sensors[0].name
        return f"New Idea {existing_ideas + 1}"
