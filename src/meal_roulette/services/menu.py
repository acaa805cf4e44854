"""In-memory menu working set with merge, draw and transfer algorithms."""

import random
from collections.abc import Iterable, Iterator

from meal_roulette.domain.menu import Category, WeightedEntry

MENU_SEPARATOR = "，"


class Menu:
    """Ordered collection of entries, unique per (owner, name, category)."""

    def __init__(self, entries: Iterable[WeightedEntry] | None = None) -> None:
        self.entries: list[WeightedEntry] = []
        if entries is not None:
            self.add(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[WeightedEntry]:
        return iter(self.entries)

    def add(self, entries: WeightedEntry | Iterable[WeightedEntry]) -> dict[str, float]:
        """Merge entries into the menu.

        An entry whose key is already present increases that entry's weight
        instead of being appended. Returns the weight added per food name for
        entries that already existed; newly appended entries are not listed.
        """
        if isinstance(entries, WeightedEntry):
            entries = [entries]
        added: dict[str, float] = {}
        for candidate in entries:
            index = self._index_of(candidate)
            if index is None:
                self.entries.append(candidate)
                continue
            current = self.entries[index]
            self.entries[index] = current.with_weight(current.weight + candidate.weight)
            added[candidate.name] = added.get(candidate.name, 0.0) + candidate.weight
        return added

    def draw(self, rng: random.Random | None = None) -> str | None:
        """Pick a food name with probability proportional to its weight."""
        total = sum(entry.weight for entry in self.entries)
        if not self.entries or total <= 0:
            return None
        roll = (rng or random).random() * total
        cumulative = 0.0
        for entry in self.entries:
            cumulative += entry.weight
            if roll < cumulative:
                return entry.name
        return None

    def reassigned_to_owner(self, owner: str) -> "Menu":
        """Return a copy of the menu owned by another user."""
        return Menu(entry.with_owner(owner) for entry in self.entries)

    def reassigned_to_category(self, category: Category) -> "Menu":
        """Return a copy of the menu moved to another category."""
        return Menu(entry.with_category(category) for entry in self.entries)

    def format(self) -> str:
        return format_entries(self.entries)

    def _index_of(self, candidate: WeightedEntry) -> int | None:
        for index, entry in enumerate(self.entries):
            if entry.key == candidate.key:
                return index
        return None


def format_weight(weight: float) -> str:
    """Render a weight without a redundant trailing .0."""
    if float(weight).is_integer():
        return str(int(weight))
    return str(weight)


def format_entries(entries: list[WeightedEntry]) -> str:
    """Render entries, showing weights only when they differ."""
    if not entries:
        return ""
    if len({entry.weight for entry in entries}) == 1:
        return MENU_SEPARATOR.join(entry.name for entry in entries)
    return MENU_SEPARATOR.join(
        f"{entry.name}({format_weight(entry.weight)})" for entry in entries
    )
