"""
Product ledger module.

Holds the ordered list of product entries the calculator works on.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator

from importcost.pricing.money_parser import parse_number

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = Decimal("1")
DEFAULT_WEIGHT_GRAMS = Decimal("100")

EDITABLE_FIELDS = ("price", "quantity", "weight")


@dataclass
class ProductEntry:
    """
    A single product row.

    Attributes:
        id: Unique, monotonically assigned identifier.
        price: Free-text price including the currency symbol.
        quantity: Unit count (non-positive values are flagged, not excluded).
        weight: Weight in grams (same policy as quantity).
    """

    id: int
    price: str = ""
    quantity: Decimal = DEFAULT_QUANTITY
    weight: Decimal = DEFAULT_WEIGHT_GRAMS

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id,
            "price": self.price,
            "quantity": float(self.quantity),
            "weight": float(self.weight),
        }


class ProductLedger:
    """
    Ordered collection of product entries.

    Entries keep insertion order. Ids start at 1 and are never reused,
    even after removal.
    """

    def __init__(self) -> None:
        self._entries: list[ProductEntry] = []
        self._next_id = 1

    def __iter__(self) -> Iterator[ProductEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[ProductEntry]:
        """Snapshot of the current entries, in insertion order."""
        return list(self._entries)

    def add(
        self,
        price: str | None = "",
        quantity: Any = DEFAULT_QUANTITY,
        weight: Any = DEFAULT_WEIGHT_GRAMS,
    ) -> ProductEntry:
        """
        Append a new entry, optionally pre-filled.

        Args:
            price: Price text (stored verbatim).
            quantity: Unit count; coerced leniently, unparseable -> 0.
            weight: Weight in grams; coerced leniently, unparseable -> 0.

        Returns:
            ProductEntry: The created entry.
        """
        entry = ProductEntry(
            id=self._next_id,
            price="" if price is None else str(price),
            quantity=parse_number(quantity),
            weight=parse_number(weight),
        )
        self._next_id += 1
        self._entries.append(entry)
        logger.debug(f"Added product {entry.id}: {entry.price!r} x {entry.quantity}, {entry.weight}g")
        return entry

    def get(self, entry_id: int) -> ProductEntry | None:
        """Return the entry with the given id, or None."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def update(self, entry_id: int, field: str, value: Any) -> ProductEntry | None:
        """
        Update one field of an entry in place.

        ``price`` is stored as text; ``quantity`` and ``weight`` are coerced
        to numbers, with unparseable input becoming 0.

        Returns:
            The updated entry, or None if no entry has that id.

        Raises:
            ValueError: If ``field`` is not an editable field.
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown product field: {field!r}. Expected one of {EDITABLE_FIELDS}")

        entry = self.get(entry_id)
        if entry is None:
            return None

        if field == "price":
            entry.price = "" if value is None else str(value)
        else:
            setattr(entry, field, parse_number(value))

        logger.debug(f"Updated product {entry_id}: {field}={getattr(entry, field)!r}")
        return entry

    def remove(self, entry_id: int) -> bool:
        """
        Remove the entry with the given id.

        Returns:
            bool: True if an entry was removed.
        """
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        removed = len(self._entries) != before
        if removed:
            logger.debug(f"Removed product {entry_id}")
        return removed

    def clear(self) -> None:
        """Remove all entries. Ids keep counting up."""
        self._entries.clear()
