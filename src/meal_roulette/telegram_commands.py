"""Telegram bot command configuration and parsing."""

from dataclasses import dataclass, field
from enum import Enum

from meal_roulette.domain.menu import Category


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    EAT = TelegramCommand("eat", "Draw something to eat from your menu")
    ADD = TelegramCommand("add", "Add foods to a menu, e.g. /add lunch rice(2)")
    MENU = TelegramCommand("menu", "Show your menu or someone else's")
    DELETE = TelegramCommand("delete", "Delete foods from your menu")
    COPY = TelegramCommand("copy", "Copy a menu from a category or a user")
    CLEAR = TelegramCommand("clear", "Clear a category or your whole menu")
    HELP = TelegramCommand("help", "Quick guide")
    START = TelegramCommand("start", "Quick guide")

    @classmethod
    def from_name(cls, name: str) -> "BotCommand | None":
        for entry in cls:
            if entry.value.command == name:
                return entry
        return None


@dataclass(frozen=True)
class MenuCommand:
    """A bot command normalized for the menu command handler."""

    command: BotCommand
    owner: str
    args: list[str] = field(default_factory=list)
    category: Category | None = None
    target_owner: str | None = None
    target_is_bot: bool = False
    unresolved_mention: bool = False


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
        if entry is not BotCommand.START
    ]


def owner_id(telegram_user_id: int) -> str:
    """Platform-qualified owner id for a Telegram user."""
    return f"telegram:{telegram_user_id}"


def parse_command(
    text: str,
    owner: str,
    target_owner: str | None = None,
    target_is_bot: bool = False,
) -> MenuCommand | None:
    """Parse ``/command[_category][@bot] args`` into a MenuCommand.

    Returns None when the text is not one of the bot's commands. Bare
    ``@username`` arguments are dropped; if no target user was resolved for
    them the command is flagged so the handler can ask for a usable mention.
    """
    parts = text.split()
    if not parts or not parts[0].startswith("/"):
        return None
    head = parts[0][1:].split("@", maxsplit=1)[0]
    name, _, suffix = head.partition("_")
    command = BotCommand.from_name(name.lower())
    if command is None:
        return None
    category = Category.parse(suffix) if suffix else None
    if suffix and category is None:
        return None

    args: list[str] = []
    mentions = 0
    for arg in parts[1:]:
        if arg.startswith("@") and len(arg) > 1:
            mentions += 1
            continue
        args.append(arg)
    return MenuCommand(
        command=command,
        owner=owner,
        args=args,
        category=category,
        target_owner=target_owner,
        target_is_bot=target_is_bot,
        unresolved_mention=mentions > 0 and target_owner is None and not target_is_bot,
    )


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
