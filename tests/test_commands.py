"""Tests for menu command handling."""

import asyncio
from datetime import UTC, datetime

from meal_roulette.containers import AppContainer
from meal_roulette.domain.menu import Category
from meal_roulette.services.commands import (
    ADD_USAGE,
    EAT_USAGE,
    MENTION_USAGE,
    MenuCommandHandler,
    category_for_hour,
)
from meal_roulette.telegram_commands import BotCommand, MenuCommand
from tests.conftest import InMemoryMenuRepository, entry

OWNER = "telegram:1"
OTHER = "telegram:2"


async def _discard(text: str) -> None:
    return None


def _handle(handler: MenuCommandHandler, command: MenuCommand) -> str:
    return asyncio.run(handler.handle(command, _discard))


def _confirm_with(
    container: AppContainer, command: MenuCommand, reply: str
) -> tuple[str, list[str]]:
    prompts: list[str] = []

    async def send(text: str) -> None:
        prompts.append(text)

    async def scenario() -> str:
        task = asyncio.create_task(container.command_handler.handle(command, send))
        while not container.confirmation_gate.is_pending(OWNER):
            await asyncio.sleep(0)
        container.confirmation_gate.resolve(OWNER, reply)
        return await task

    return asyncio.run(scenario()), prompts


def test_add_reports_increased_weights(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("rice")])

    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.ADD, OWNER, ["lunch", "rice(2)|noodles"]),
    )

    assert "Weight increased: rice(2)" in reply
    assert "Lunch menu: rice(3)，noodles(1)" in reply


def test_add_with_category_suffix_and_chinese_alias(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    _handle(
        container.command_handler,
        MenuCommand(BotCommand.ADD, OWNER, ["午饭", "rice"]),
    )
    _handle(
        container.command_handler,
        MenuCommand(BotCommand.ADD, OWNER, ["tea"], category=Category.DRINK),
    )

    assert [(item.name, item.category) for item in menu_repository.entries] == [
        ("rice", Category.LUNCH),
        ("tea", Category.DRINK),
    ]


def test_add_without_foods_returns_usage(container: AppContainer) -> None:
    reply = _handle(
        container.command_handler, MenuCommand(BotCommand.ADD, OWNER, ["lunch"])
    )

    assert reply == ADD_USAGE


def test_add_invalid_tokens_returns_format_error(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.ADD, OWNER, ["lunch", "rice", "A(-1)"]),
    )

    assert "name1(weight)" in reply
    assert menu_repository.entries == []


def test_add_overflowing_merge_keeps_stored_weight(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("rice", 1e308)])
    big = "1" + "0" * 308

    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.ADD, OWNER, ["lunch", f"rice({big})"]),
    )

    assert reply == "Weight of rice is too large."
    assert [item.weight for item in menu_repository.get(OWNER)] == [1e308]


def test_eat_without_category_uses_local_hour(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("congee", category=Category.BREAKFAST)])
    handler = container.command_handler
    handler.clock = lambda: datetime(2024, 5, 1, 8, 30, tzinfo=UTC)

    reply = _handle(handler, MenuCommand(BotCommand.EAT, OWNER))

    assert reply == "Have congee for breakfast!"


def test_eat_unknown_category_returns_usage(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("congee", category=Category.BREAKFAST)])

    reply = _handle(
        container.command_handler, MenuCommand(BotCommand.EAT, OWNER, ["brunch"])
    )

    assert reply == EAT_USAGE


def test_category_for_hour_boundaries() -> None:
    assert category_for_hour(4) is Category.BREAKFAST
    assert category_for_hour(11) is Category.LUNCH
    assert category_for_hour(16) is Category.DINNER
    assert category_for_hour(23) is Category.MIDNIGHT
    assert category_for_hour(3) is Category.MIDNIGHT


def test_view_other_owner_and_bot(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("pho", owner=OTHER)])
    handler = container.command_handler

    theirs = _handle(
        handler, MenuCommand(BotCommand.MENU, OWNER, ["lunch"], target_owner=OTHER)
    )
    empty = _handle(handler, MenuCommand(BotCommand.MENU, OWNER))
    bot = _handle(handler, MenuCommand(BotCommand.MENU, OWNER, target_is_bot=True))

    assert theirs == "Their Lunch menu: pho"
    assert empty.startswith("Your menu is empty")
    assert bot == container.settings.bot_menu_text


def test_unresolved_mention_returns_reminder(container: AppContainer) -> None:
    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.COPY, OWNER, unresolved_mention=True),
    )

    assert reply == MENTION_USAGE


def test_copy_from_other_user_needs_no_confirmation(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("pho", owner=OTHER), entry("salad")])

    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.COPY, OWNER, ["lunch"], target_owner=OTHER),
    )

    assert reply.startswith("Copied their lunch menu!")
    assert [item.name for item in menu_repository.get(OWNER)] == ["pho"]
    assert [item.name for item in menu_repository.get(OTHER)] == ["pho"]


def test_copy_category_confirmed_overwrites(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert(
        [entry("steak", category=Category.DINNER), entry("salad")]
    )
    command = MenuCommand(BotCommand.COPY, OWNER, ["lunch", "dinner"])

    reply, prompts = _confirm_with(container, command, "确定")

    assert "will be overwritten" in prompts[0]
    assert "Dinner menu: steak" in prompts[0]
    assert reply.startswith("Copied your dinner menu to your lunch menu!")
    assert [item.name for item in menu_repository.get(OWNER, Category.LUNCH)] == [
        "steak"
    ]


def test_copy_category_rejected_changes_nothing(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert(
        [entry("steak", category=Category.DINNER), entry("salad")]
    )
    upserts = menu_repository.upserts
    command = MenuCommand(BotCommand.COPY, OWNER, ["lunch", "dinner"])

    reply, _ = _confirm_with(container, command, "maybe")

    assert reply == "Operation cancelled..."
    assert [item.name for item in menu_repository.get(OWNER, Category.LUNCH)] == [
        "salad"
    ]
    assert menu_repository.upserts == upserts


def test_copy_category_onto_itself_is_refused(container: AppContainer) -> None:
    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.COPY, OWNER, ["lunch", "午饭"]),
    )

    assert reply == "That is already your lunch menu."


def test_clear_all_requires_confirmation(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("salad"), entry("tea", category=Category.DRINK)])

    timed_out = _handle(container.command_handler, MenuCommand(BotCommand.CLEAR, OWNER))
    assert timed_out == "Clear cancelled."
    assert len(menu_repository.get(OWNER)) == 2

    reply, prompts = _confirm_with(
        container, MenuCommand(BotCommand.CLEAR, OWNER), "confirm"
    )
    assert "ALL of your menus" in prompts[0]
    assert reply == "Cleared all of your menus!"
    assert menu_repository.get(OWNER) == []


def test_delete_category_without_names_clears_it(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("salad"), entry("tea", category=Category.DRINK)])

    reply = _handle(
        container.command_handler, MenuCommand(BotCommand.DELETE, OWNER, ["lunch"])
    )

    assert reply == "Cleared your lunch menu!"
    assert [item.name for item in menu_repository.get(OWNER)] == ["tea"]


def test_delete_names_reports_each(
    container: AppContainer, menu_repository: InMemoryMenuRepository
) -> None:
    menu_repository.upsert([entry("salad"), entry("soup")])

    reply = _handle(
        container.command_handler,
        MenuCommand(BotCommand.DELETE, OWNER, ["salad", "pizza"]),
    )

    assert "Deleted salad." in reply
    assert "pizza is not on your menu." in reply
    assert "Lunch menu: soup" in reply
