"""Domain models for weighted food menus."""

import math
from dataclasses import dataclass, replace
from enum import Enum

from meal_roulette.domain.errors import InvalidArgumentFormatError, InvalidWeightError


class Category(Enum):
    """Fixed meal slots a menu can belong to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACKS = "snacks"
    DRINK = "drink"
    MIDNIGHT = "midnight"

    @property
    def label(self) -> str:
        """Human readable name of the category."""
        return _LABELS[self]

    @classmethod
    def parse(cls, text: str | None) -> "Category | None":
        """Resolve a category from its value, label or alias."""
        if not text:
            return None
        return _ALIASES.get(text.strip().lower())


_LABELS = {
    Category.BREAKFAST: "Breakfast",
    Category.LUNCH: "Lunch",
    Category.DINNER: "Dinner",
    Category.SNACKS: "Snacks",
    Category.DRINK: "Drink",
    Category.MIDNIGHT: "Midnight snack",
}

_ALIASES: dict[str, Category] = {
    **{category.value: category for category in Category},
    **{label.lower(): category for category, label in _LABELS.items()},
    "middlenight": Category.MIDNIGHT,
    "早饭": Category.BREAKFAST,
    "早餐": Category.BREAKFAST,
    "午饭": Category.LUNCH,
    "午餐": Category.LUNCH,
    "晚饭": Category.DINNER,
    "晚餐": Category.DINNER,
    "零食": Category.SNACKS,
    "小吃": Category.SNACKS,
    "饮料": Category.DRINK,
    "喝的": Category.DRINK,
    "夜宵": Category.MIDNIGHT,
    "宵夜": Category.MIDNIGHT,
}


@dataclass(frozen=True)
class WeightedEntry:
    """One food choice on an owner's menu for a category."""

    owner: str | None
    name: str
    category: Category
    weight: float = 1.0

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgumentFormatError("Food name can't be empty.")
        if self.weight <= 0:
            raise InvalidWeightError(
                f"Weight of {self.name} must be greater than 0 (got {self.weight:g})."
            )
        if not math.isfinite(self.weight):
            raise InvalidWeightError(f"Weight of {self.name} is too large.")

    @property
    def key(self) -> tuple[str | None, str, Category]:
        """Primary key of the entry."""
        return self.owner, self.name, self.category

    def with_owner(self, owner: str) -> "WeightedEntry":
        return replace(self, owner=owner)

    def with_category(self, category: Category) -> "WeightedEntry":
        return replace(self, category=category)

    def with_weight(self, weight: float) -> "WeightedEntry":
        return replace(self, weight=weight)
