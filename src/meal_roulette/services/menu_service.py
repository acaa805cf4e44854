"""Menu operations backed by the entry store."""

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from meal_roulette.domain.menu import Category, WeightedEntry
from meal_roulette.services.menu import (
    MENU_SEPARATOR,
    Menu,
    format_entries,
    format_weight,
)
from meal_roulette.services.parser import parse_entries

_logger = logging.getLogger(__name__)

# Empty category -> category whose menu is worth copying instead.
_COPY_SUGGESTIONS = {
    Category.LUNCH: Category.DINNER,
    Category.DINNER: Category.LUNCH,
    Category.MIDNIGHT: Category.DINNER,
}


class MenuRepository(Protocol):
    """Persistence interface for menu entries keyed by owner/name/category."""

    def get(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> list[WeightedEntry]:
        """Return entries matching the owner and optional filters."""

    def upsert(self, entries: list[WeightedEntry]) -> None:
        """Insert entries or replace the ones sharing their key."""

    def remove(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> None:
        """Delete entries matching the owner and optional filters."""


@dataclass(frozen=True)
class DrawResult:
    """Outcome of a draw; ``food`` is None when nothing could be drawn."""

    food: str | None
    message: str


@dataclass(frozen=True)
class AddResult:
    """Outcome of adding foods to a category."""

    category: Category
    increased: dict[str, float]
    menu: str


@dataclass(frozen=True)
class DeleteResult:
    """Names removed and names that were not on the menu."""

    deleted: list[str]
    missing: list[str]


@dataclass
class MenuService:
    """Application service for reading and updating food menus."""

    repository: MenuRepository
    draw_texts: dict[Category, str] = field(default_factory=dict)
    rng: random.Random = field(default_factory=random.Random)

    def load(self, owner: str, category: Category | None = None) -> Menu:
        """Load a snapshot of the owner's menu."""
        return Menu(self.repository.get(owner, category))

    def draw(self, owner: str, category: Category) -> DrawResult:
        """Draw a food from the owner's category menu."""
        menu = self.load(owner, category)
        if not menu:
            return DrawResult(food=None, message=self._empty_menu_hint(owner, category))
        food = menu.draw(self.rng)
        if food is None:
            return DrawResult(food=None, message="Couldn't draw from the menu!")
        template = self.draw_texts.get(category, "How about [food]?")
        return DrawResult(food=food, message=template.replace("[food]", food))

    def add(self, owner: str, category: Category, tokens: list[str]) -> AddResult:
        """Parse tokens and merge them into the owner's category menu."""
        candidates = parse_entries(category, tokens, owner=owner)
        menu = self.load(owner, category)
        increased = menu.add(candidates)
        self.repository.upsert(menu.entries)
        _logger.info(
            "Menu add: owner=%s category=%s items=%s",
            owner,
            category.value,
            len(candidates),
        )
        return AddResult(
            category=category,
            increased=increased,
            menu=self.show_category(owner, category),
        )

    def show_category(self, owner: str, category: Category) -> str:
        """Render one category, or an empty string if it has no entries."""
        entries = self.repository.get(owner, category)
        if not entries:
            return ""
        return f"{category.label} menu: {format_entries(entries)}"

    def show_all(self, owner: str) -> str:
        """Render every non-empty category of the owner."""
        menu = self.load(owner)
        blocks = []
        for category in Category:
            entries = [entry for entry in menu if entry.category is category]
            if entries:
                blocks.append(f"{category.label} menu: {format_entries(entries)}")
        return "\n".join(blocks)

    def has_entries(self, owner: str, category: Category | None = None) -> bool:
        return bool(self.repository.get(owner, category))

    def delete(
        self, owner: str, names: list[str], category: Category | None = None
    ) -> DeleteResult:
        """Delete foods by name, optionally limited to one category."""
        deleted: list[str] = []
        missing: list[str] = []
        for name in names:
            if not self.repository.get(owner, category, name):
                missing.append(name)
                continue
            self.repository.remove(owner, category, name)
            deleted.append(name)
        _logger.info("Menu delete: owner=%s deleted=%s", owner, len(deleted))
        return DeleteResult(deleted=deleted, missing=missing)

    def clear(self, owner: str, category: Category | None = None) -> None:
        """Remove a category, or the whole menu when category is None."""
        self.repository.remove(owner, category)
        _logger.info(
            "Menu clear: owner=%s category=%s",
            owner,
            category.value if category else "*",
        )

    def copy_from_owner(
        self, owner: str, source_owner: str, category: Category | None = None
    ) -> Menu:
        """Replace the owner's menu scope with a copy of another user's."""
        copied = self.load(source_owner, category).reassigned_to_owner(owner)
        self._replace(owner, category, copied)
        _logger.info(
            "Menu copy: source=%s target=%s category=%s items=%s",
            source_owner,
            owner,
            category.value if category else "*",
            len(copied),
        )
        return copied

    def copy_category(
        self, owner: str, destination: Category, source: Category
    ) -> Menu:
        """Replace one of the owner's categories with a copy of another."""
        copied = self.load(owner, source).reassigned_to_category(destination)
        self._replace(owner, destination, copied)
        _logger.info(
            "Menu copy: owner=%s %s -> %s items=%s",
            owner,
            source.value,
            destination.value,
            len(copied),
        )
        return copied

    def _replace(self, owner: str, category: Category | None, menu: Menu) -> None:
        self.repository.remove(owner, category)
        if menu.entries:
            self.repository.upsert(menu.entries)

    def _empty_menu_hint(self, owner: str, category: Category) -> str:
        alternative = _COPY_SUGGESTIONS.get(category)
        if alternative is not None and self.has_entries(owner, alternative):
            return (
                f"Your {category.label.lower()} menu is empty...\n"
                f"But you have a {alternative.label.lower()} menu. Use\n"
                f"/copy {category.value} {alternative.value}\n"
                "to copy it over."
            )
        return (
            f"Your {category.label.lower()} menu is empty...\n"
            f"Use /add {category.value} food1 food2 ... to add foods,\n"
            "or /copy to copy a menu."
        )


def format_increased(increased: dict[str, float]) -> str:
    """Render the weights added to foods that were already on the menu."""
    return MENU_SEPARATOR.join(
        f"{name}({format_weight(weight)})" for name, weight in increased.items()
    )
