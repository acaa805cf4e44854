"""Command handlers for menu bot commands."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from meal_roulette.domain.errors import (
    InvalidArgumentFormatError,
    MenuError,
    UnknownTargetError,
)
from meal_roulette.domain.menu import Category
from meal_roulette.services.confirmation import ConfirmationGate, ConfirmationState
from meal_roulette.services.menu_service import MenuService, format_increased
from meal_roulette.telegram_commands import BotCommand, MenuCommand

_logger = logging.getLogger(__name__)

_CATEGORIES = "/".join(category.value for category in Category)

HELP_TEXT = (
    "What should I eat? Let me pick for you!\n"
    f"/eat [{_CATEGORIES}] - draw from your menu\n"
    "/add <category> food1 food2(2) ... - add foods, weights in parentheses\n"
    "/menu [category] - show your menu (reply to someone to see theirs)\n"
    "/delete [category] food1 food2 ... - delete foods\n"
    "/copy <category> <source category> - copy one of your menus\n"
    "/copy [category] - reply to someone to copy their menu\n"
    "/clear [category] - clear a menu"
)
EAT_USAGE = (
    "Usage:\n/eat\n"
    f"/eat {_CATEGORIES}\n"
    "Without a category I pick one by the time of day."
)
ADD_USAGE = (
    "Usage:\n"
    f"/add {_CATEGORIES} food1 food2 ...\n"
    "Put a number in parentheses after a food to set its weight, e.g.\n"
    "/add breakfast bread(2) eggs(1)"
)
VIEW_USAGE = (
    "Usage:\n/menu\n"
    f"/menu {_CATEGORIES}\n"
    "Reply to someone's message with /menu [category] to see their menu."
)
DELETE_USAGE = "Usage:\n/delete [category] food1 food2 ..."
COPY_USAGE = (
    "Usage:\n"
    "/copy <category> <source category>\n"
    "or reply to someone's message with /copy [category]"
)
CLEAR_USAGE = f"Usage:\n/clear\n/clear {_CATEGORIES}"
MENTION_USAGE = (
    "I can't tell who that is. Reply to one of their messages "
    "or pick them from the mention list."
)

COPY_TOKENS = ("确定",)
CLEAR_TOKENS = ("确认",)

SendText = Callable[[str], Awaitable[None]]


def category_for_hour(hour: int) -> Category:
    """Pick the meal that fits the local hour."""
    if 4 <= hour < 11:
        return Category.BREAKFAST
    if 11 <= hour < 16:
        return Category.LUNCH
    if 16 <= hour < 23:
        return Category.DINNER
    return Category.MIDNIGHT


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MenuCommandHandler:
    """Route menu commands to the menu service and render replies."""

    menu_service: MenuService
    confirmation_gate: ConfirmationGate
    confirm_token: str = "confirm"
    timezone: str = "UTC"
    bot_menu_text: str = "I don't have a menu..."
    clock: Callable[[], datetime] = field(default=_utc_now)

    async def handle(self, command: MenuCommand, send: SendText) -> str:
        """Run a command and return the reply text.

        Menu errors are turned into their user-facing message. Store failures
        propagate to the caller.
        """
        try:
            if command.unresolved_mention:
                raise UnknownTargetError(MENTION_USAGE)
            return await self._dispatch(command, send)
        except MenuError as exc:
            _logger.info(
                "Menu command rejected: command=%s error=%s",
                command.command.value.command,
                type(exc).__name__,
            )
            return exc.message

    async def _dispatch(  # noqa: PLR0911
        self, command: MenuCommand, send: SendText
    ) -> str:
        if command.command is BotCommand.EAT:
            return self._draw(command)
        if command.command is BotCommand.ADD:
            return self._add(command)
        if command.command is BotCommand.MENU:
            return self._view(command)
        if command.command is BotCommand.DELETE:
            return self._delete(command)
        if command.command is BotCommand.COPY:
            return await self._copy(command, send)
        if command.command is BotCommand.CLEAR:
            return await self._clear(command, send)
        return HELP_TEXT

    def _draw(self, command: MenuCommand) -> str:
        category, rest = _split_category(command)
        if rest:
            raise UnknownTargetError(EAT_USAGE)
        if category is None:
            local_now = self.clock().astimezone(ZoneInfo(self.timezone))
            category = category_for_hour(local_now.hour)
        return self.menu_service.draw(command.owner, category).message

    def _add(self, command: MenuCommand) -> str:
        category, tokens = _split_category(command)
        if category is None or not tokens:
            raise InvalidArgumentFormatError(ADD_USAGE)
        result = self.menu_service.add(command.owner, category, tokens)
        lines = [f"Added to your {category.label.lower()} menu."]
        if result.increased:
            lines.append(f"Weight increased: {format_increased(result.increased)}")
        lines.append(result.menu)
        return "\n".join(lines)

    def _view(self, command: MenuCommand) -> str:
        if command.target_is_bot:
            return self.bot_menu_text
        category, rest = _split_category(command)
        if rest:
            raise UnknownTargetError(VIEW_USAGE)
        own = command.target_owner in {None, command.owner}
        owner = command.owner if own else str(command.target_owner)
        whose = "Your" if own else "Their"
        if category is None:
            menu = self.menu_service.show_all(owner)
            if not menu:
                if own:
                    return (
                        "Your menu is empty, use\n"
                        "/add <category> food1 food2 ...\nto add foods."
                    )
                return "Their menu is empty..."
            return f"{whose} menu:\n{menu}"
        menu = self.menu_service.show_category(owner, category)
        if not menu:
            if own:
                return (
                    f"Your {category.label.lower()} menu is empty, use\n"
                    f"/add {category.value} food1 food2 ...\nto add foods."
                )
            return f"Their {category.label.lower()} menu is empty..."
        return f"{whose} {menu}"

    def _delete(self, command: MenuCommand) -> str:
        category, names = _split_category(command)
        if category is None and not names:
            raise UnknownTargetError(DELETE_USAGE)
        if not names:
            self.menu_service.clear(command.owner, category)
            return f"Cleared your {category.label.lower()} menu!"
        result = self.menu_service.delete(command.owner, names, category)
        lines = [f"Deleted {name}." for name in result.deleted]
        lines.extend(f"{name} is not on your menu." for name in result.missing)
        if category is None:
            menu = self.menu_service.show_all(command.owner)
        else:
            menu = self.menu_service.show_category(command.owner, category)
        lines.append(f"Your menu:\n{menu}" if menu else "Your menu is empty now.")
        return "\n".join(lines)

    async def _copy(self, command: MenuCommand, send: SendText) -> str:
        if command.target_is_bot:
            return self.bot_menu_text
        category, rest = _split_category(command)
        if command.target_owner is not None:
            if rest:
                raise UnknownTargetError(COPY_USAGE)
            return self._copy_from_owner(command, category)
        source = _leading_category(rest)
        if category is None or source is None or len(rest) > 1:
            raise UnknownTargetError(COPY_USAGE)
        if source is category:
            raise UnknownTargetError(
                f"That is already your {category.label.lower()} menu."
            )
        return await self._copy_category(command.owner, category, source, send)

    def _copy_from_owner(self, command: MenuCommand, category: Category | None) -> str:
        if command.target_owner == command.owner:
            raise UnknownTargetError("You can't copy your own menu onto itself.")
        self.menu_service.copy_from_owner(
            command.owner, str(command.target_owner), category
        )
        if category is None:
            menu = self.menu_service.show_all(command.owner)
            scope = "menu"
        else:
            menu = self.menu_service.show_category(command.owner, category)
            scope = f"{category.label.lower()} menu"
        return f"Copied their {scope}!\nYour {scope}:\n{menu or '(empty)'}"

    async def _copy_category(
        self, owner: str, destination: Category, source: Category, send: SendText
    ) -> str:
        source_menu = self.menu_service.show_category(owner, source)
        prompt = "\n".join(
            [
                f"Copy your {source.label.lower()} menu to your "
                f"{destination.label.lower()} menu?",
                f"Your {destination.label.lower()} menu will be overwritten!",
                self._reply_hint(COPY_TOKENS),
                source_menu
                or f"Your {source.label.lower()} menu is empty, copy it anyway?",
            ]
        )
        state = await self.confirmation_gate.request(
            owner, prompt, (*COPY_TOKENS, self.confirm_token), send
        )
        if state is not ConfirmationState.CONFIRMED:
            return "Operation cancelled..."
        self.menu_service.copy_category(owner, destination, source)
        menu = self.menu_service.show_category(owner, destination)
        return (
            f"Copied your {source.label.lower()} menu to your "
            f"{destination.label.lower()} menu!\n{menu or '(empty)'}"
        )

    async def _clear(self, command: MenuCommand, send: SendText) -> str:
        category, rest = _split_category(command)
        if rest:
            raise UnknownTargetError(CLEAR_USAGE)
        if category is not None:
            self.menu_service.clear(command.owner, category)
            return f"Cleared your {category.label.lower()} menu!"
        prompt = (
            "Without a category this clears ALL of your menus. Are you sure?\n"
            + self._reply_hint(CLEAR_TOKENS)
        )
        state = await self.confirmation_gate.request(
            command.owner, prompt, (*CLEAR_TOKENS, self.confirm_token), send
        )
        if state is not ConfirmationState.CONFIRMED:
            return "Clear cancelled."
        self.menu_service.clear(command.owner)
        return "Cleared all of your menus!"

    def _reply_hint(self, tokens: tuple[str, ...]) -> str:
        seconds = f"{self.confirmation_gate.timeout_seconds:g}"
        choices = " or ".join(f'"{token}"' for token in (*tokens, self.confirm_token))
        return f"Reply {choices} within {seconds} seconds to confirm."


def _leading_category(args: list[str]) -> Category | None:
    return Category.parse(args[0]) if args else None


def _split_category(command: MenuCommand) -> tuple[Category | None, list[str]]:
    """Return the command category and the remaining arguments."""
    if command.category is not None:
        return command.category, list(command.args)
    category = _leading_category(command.args)
    if category is None:
        return None, list(command.args)
    return category, list(command.args[1:])
