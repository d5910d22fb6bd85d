"""Card model read from Wekan's ``cards`` collection."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


def render_value(value: Any) -> str:
    """Render a stored custom-field value as text.

    Wekan stores custom-field values as whatever the field type produced
    (strings, numbers, booleans, dates). Integral floats are written
    without a decimal part and booleans in lower case, so ``3.0`` and
    ``"3"`` render the same.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CustomFieldValues(Mapping[str, str]):
    """Custom-field values of a card, keyed by field id, in stored order.

    A field is *absent* when the card has no entry for it or the entry's
    value is null; ``get()`` then returns None. A field can also be
    *present but empty* (``get()`` returns ``""``). Hooks branch on both.
    """

    def __init__(self, pairs: Iterable[tuple[str, Any]] = ()):
        self._values: dict[str, str] = {}
        for field_id, value in pairs:
            if value is None:
                continue
            self._values[field_id] = render_value(value)

    @classmethod
    def from_documents(cls, entries: Iterable[Mapping[str, Any]] | None) -> "CustomFieldValues":
        """Build from the ``customFields`` array of a card document."""
        return cls((entry.get("_id", ""), entry.get("value")) for entry in entries or ())

    def __getitem__(self, field_id: str) -> str:
        return self._values[field_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def has_value(self, field_id: str) -> bool:
        """Return True if the field is present and not empty."""
        return bool(self._values.get(field_id))

    def __repr__(self) -> str:
        return f"CustomFieldValues({self._values!r})"


@dataclass
class Card:
    """A Wekan card, reduced to the attributes the hooks look at."""

    id: str
    title: str = ""
    parent_id: str | None = None
    board_id: str | None = None
    custom_fields: CustomFieldValues = field(default_factory=CustomFieldValues)

    @property
    def has_parent(self) -> bool:
        return bool(self.parent_id)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Card":
        """
        Build a Card from a raw card document.

        Args:
            doc: Document from the ``cards`` collection

        Returns:
            Card with empty parent/board references normalized to None
        """
        return cls(
            id=doc["_id"],
            title=doc.get("title") or "",
            parent_id=doc.get("parentId") or None,
            board_id=doc.get("boardId") or None,
            custom_fields=CustomFieldValues.from_documents(doc.get("customFields")),
        )
