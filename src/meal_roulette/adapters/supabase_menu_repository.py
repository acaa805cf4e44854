"""Supabase implementation for menu entries."""

from dataclasses import dataclass

from supabase import Client

from meal_roulette.domain.menu import Category, WeightedEntry
from meal_roulette.services.menu_service import MenuRepository

_PRIMARY_KEY = "owner,food_name,category"


@dataclass
class SupabaseMenuRepository(MenuRepository):
    """Supabase-backed repository for user food menus."""

    client: Client
    table_name: str = "user_food_menu"

    def get(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> list[WeightedEntry]:
        """Return entries matching the owner and optional filters."""
        query = self.client.table(self.table_name).select("*").eq("owner", owner)
        if category is not None:
            query = query.eq("category", category.value)
        if name is not None:
            query = query.eq("food_name", name)
        # Rows written by one upsert share created_at; id keeps their payload order.
        response = query.order("created_at").order("id").execute()
        return [_parse_entry(row) for row in response.data or []]

    def upsert(self, entries: list[WeightedEntry]) -> None:
        """Insert entries or replace the rows sharing their key."""
        if not entries:
            return
        payload = [_serialize_entry(entry) for entry in entries]
        response = (
            self.client.table(self.table_name)
            .upsert(payload, on_conflict=_PRIMARY_KEY)
            .execute()
        )
        if response.data is None:
            raise RuntimeError("Failed to upsert menu entries")

    def remove(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> None:
        """Delete entries matching the owner and optional filters."""
        query = self.client.table(self.table_name).delete().eq("owner", owner)
        if category is not None:
            query = query.eq("category", category.value)
        if name is not None:
            query = query.eq("food_name", name)
        query.execute()


def _serialize_entry(entry: WeightedEntry) -> dict[str, object]:
    if entry.owner is None:
        raise ValueError(f"Entry {entry.name} has no owner")
    return {
        "owner": entry.owner,
        "food_name": entry.name,
        "category": entry.category.value,
        "weight": entry.weight,
    }


def _parse_entry(row: dict[str, object]) -> WeightedEntry:
    """Parse a menu row into a domain model."""
    category = Category.parse(str(row.get("category", "")))
    if category is None:
        raise ValueError(f"Unknown menu category: {row.get('category')}")
    return WeightedEntry(
        owner=str(row["owner"]),
        name=str(row["food_name"]),
        category=category,
        weight=float(row.get("weight", 1.0)),
    )
