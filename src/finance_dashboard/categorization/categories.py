"""
Category names and the ordered, user-editable category set.

Stored transactions keep whatever category string they were saved with.
Renaming or removing a category here never rewrites them.
"""
from typing import Iterable, List, Optional

UNCATEGORIZED = "Uncategorized"

DEFAULT_CATEGORIES = [
    "Food & Drink",
    "Transport",
    "Utilities",
    "Housing",
    "Shopping",
    "Entertainment",
    "Health",
    "Income",
    "Transfer",
    "Other",
]


class CategorySet:
    """
    Ordered sequence of unique category names.

    Order matters: it drives default rule-category choices and the
    group order of the transaction listing.
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._names: List[str] = []
        for name in (DEFAULT_CATEGORIES if names is None else names):
            self.add(name)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def default_choice(self) -> str:
        """Category pre-selected when creating a new rule"""
        return self._names[0] if self._names else UNCATEGORIZED

    def add(self, name: str) -> bool:
        """Append a category. Blank names and duplicates are ignored."""
        trimmed = name.strip()
        if not trimmed or trimmed in self._names:
            return False
        self._names.append(trimmed)
        return True

    def remove(self, name: str) -> bool:
        if name not in self._names:
            return False
        self._names.remove(name)
        return True

    def rename(self, old: str, new: str) -> bool:
        """
        Rename a category in place, keeping its position.

        Existing transactions labelled with the old name keep it.
        """
        trimmed = new.strip()
        if old not in self._names or not trimmed:
            return False
        if trimmed != old and trimmed in self._names:
            return False
        self._names[self._names.index(old)] = trimmed
        return True

    def index_of(self, name: str) -> int:
        """Position of the category, or -1 if it is not in the set"""
        try:
            return self._names.index(name)
        except ValueError:
            return -1

    def normalize(self, name: Optional[str]) -> str:
        """Return name if it belongs to the set, else the unknown fallback"""
        if name is not None and name in self._names:
            return name
        return UNCATEGORIZED

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self):
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategorySet):
            return NotImplemented
        return self._names == other._names

    def __repr__(self) -> str:
        return f"CategorySet({self._names!r})"
