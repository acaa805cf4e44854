"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_roulette.domain.menu import Category

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    supabase_url: str
    supabase_service_key: str
    telegram_allowed_user_ids: str | None = None
    environment: str = _ENVIRONMENT
    menu_table: str = "user_food_menu"
    at_the_user: bool = False
    confirm_timeout_seconds: float = 15.0
    confirm_token: str = "confirm"
    timezone: str = "UTC"
    bot_menu_text: str = "I don't have a menu..."
    breakfast_text: str = "Have [food] for breakfast!"
    lunch_text: str = "Have [food] for lunch!"
    dinner_text: str = "Have [food] for dinner!"
    snacks_text: str = "Snack on [food]!"
    drink_text: str = "Drink [food]!"
    midnight_text: str = "Have [food] as a midnight snack!"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def draw_texts(self) -> dict[Category, str]:
        """Return the draw reply template for each category."""
        return {
            Category.BREAKFAST: self.breakfast_text,
            Category.LUNCH: self.lunch_text,
            Category.DINNER: self.dinner_text,
            Category.SNACKS: self.snacks_text,
            Category.DRINK: self.drink_text,
            Category.MIDNIGHT: self.midnight_text,
        }


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse allowed Telegram user IDs from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[int] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if not value:
            continue
        if value.isdigit():
            ids.add(int(value))
    return ids or None
