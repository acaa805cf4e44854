"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_roulette.adapters.supabase_menu_repository import SupabaseMenuRepository
from meal_roulette.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from meal_roulette.config import Settings
from meal_roulette.services.commands import MenuCommandHandler
from meal_roulette.services.confirmation import ConfirmationGate
from meal_roulette.services.menu_service import MenuService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    menu_service: MenuService
    confirmation_gate: ConfirmationGate
    command_handler: MenuCommandHandler
    close_resources: Callable[[], Awaitable[None]]


def build_command_handler(
    settings: Settings, menu_service: MenuService, gate: ConfirmationGate
) -> MenuCommandHandler:
    """Create the command handler configured from settings."""
    return MenuCommandHandler(
        menu_service=menu_service,
        confirmation_gate=gate,
        confirm_token=settings.confirm_token,
        timezone=settings.timezone,
        bot_menu_text=settings.bot_menu_text,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    menu_repository = SupabaseMenuRepository(
        supabase_client, table_name=resolved_settings.menu_table
    )
    menu_service = MenuService(
        repository=menu_repository,
        draw_texts=resolved_settings.draw_texts(),
    )
    gate = ConfirmationGate(timeout_seconds=resolved_settings.confirm_timeout_seconds)
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)

    async def close_resources() -> None:
        await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        menu_service=menu_service,
        confirmation_gate=gate,
        command_handler=build_command_handler(resolved_settings, menu_service, gate),
        close_resources=close_resources,
    )
