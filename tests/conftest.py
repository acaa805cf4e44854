"""Shared test fixtures."""

import random
from dataclasses import dataclass, field

import pytest

from meal_roulette.adapters.telegram_client import TelegramClient
from meal_roulette.config import Settings
from meal_roulette.containers import AppContainer, build_command_handler
from meal_roulette.domain.menu import Category, WeightedEntry
from meal_roulette.services.confirmation import ConfirmationGate
from meal_roulette.services.menu_service import MenuRepository, MenuService


@dataclass
class InMemoryMenuRepository(MenuRepository):
    """In-memory menu repository for tests, keeping insertion order."""

    entries: list[WeightedEntry] = field(default_factory=list)
    upserts: int = 0

    def get(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> list[WeightedEntry]:
        return [
            entry
            for entry in self.entries
            if _matches(entry, owner, category, name)
        ]

    def upsert(self, entries: list[WeightedEntry]) -> None:
        self.upserts += 1
        for entry in entries:
            for index, existing in enumerate(self.entries):
                if existing.key == entry.key:
                    self.entries[index] = entry
                    break
            else:
                self.entries.append(entry)

    def remove(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> None:
        self.entries = [
            entry
            for entry in self.entries
            if not _matches(entry, owner, category, name)
        ]


def _matches(
    entry: WeightedEntry, owner: str, category: Category | None, name: str | None
) -> bool:
    return (
        entry.owner == owner
        and (category is None or entry.category is category)
        and (name is None or entry.name == name)
    )


@dataclass
class BrokenMenuRepository(InMemoryMenuRepository):
    """Repository whose reads fail like an unavailable store."""

    def get(
        self, owner: str, category: Category | None = None, name: str | None = None
    ) -> list[WeightedEntry]:
        raise RuntimeError("store unavailable")


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None

    async def send_message(self, chat_id: int, text: str) -> None:
        self.messages.append((chat_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button


def entry(
    name: str,
    weight: float = 1.0,
    category: Category = Category.LUNCH,
    owner: str = "telegram:1",
) -> WeightedEntry:
    return WeightedEntry(owner=owner, name=name, category=category, weight=weight)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        confirm_timeout_seconds=0.05,
    )


@pytest.fixture
def menu_repository() -> InMemoryMenuRepository:
    return InMemoryMenuRepository()


@pytest.fixture
def menu_service(
    settings: Settings, menu_repository: InMemoryMenuRepository
) -> MenuService:
    return MenuService(
        repository=menu_repository,
        draw_texts=settings.draw_texts(),
        rng=random.Random(7),
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def container(
    settings: Settings,
    menu_service: MenuService,
    telegram_client: FakeTelegramClient,
) -> AppContainer:
    gate = ConfirmationGate(timeout_seconds=settings.confirm_timeout_seconds)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        menu_service=menu_service,
        confirmation_gate=gate,
        command_handler=build_command_handler(settings, menu_service, gate),
        close_resources=close_resources,
    )
