"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, Request

from meal_roulette.api.telegram_models import (
    TelegramMessage,
    TelegramUpdate,
    TelegramUser,
)
from meal_roulette.app_logging import configure_logging
from meal_roulette.config import parse_allowed_user_ids
from meal_roulette.containers import AppContainer
from meal_roulette.telegram_commands import (
    CHAT_MENU_BUTTON,
    MenuCommand,
    owner_id,
    parse_command,
    telegram_commands,
)

FAILURE_TEXT = "Something went wrong while updating your menu. Please try again."


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    async def run_command(
        state_container: AppContainer, command: MenuCommand, chat_id: int, prefix: str
    ) -> None:
        async def send(text: str) -> None:
            await state_container.telegram_client.send_message(
                chat_id=chat_id, text=prefix + text
            )

        try:
            reply = await state_container.command_handler.handle(command, send)
        except Exception:
            logger.exception(
                "Menu command failed",
                extra={"owner": command.owner, "command": command.command.name},
            )
            reply = FAILURE_TEXT
        await send(reply)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request, background_tasks: BackgroundTasks
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message is None or not message.text:
            return {"status": "ok"}
        if not _is_user_allowed(message.from_user.id, allowed_user_ids):
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text="This bot is private.",
            )
            return {"status": "ok"}

        owner = owner_id(message.from_user.id)
        if state_container.confirmation_gate.resolve(owner, message.text):
            return {"status": "ok"}

        target = _resolve_target(message)
        command = parse_command(
            _strip_text_mentions(message),
            owner=owner,
            target_owner=owner_id(target.id) if target and not target.is_bot else None,
            target_is_bot=bool(target and target.is_bot),
        )
        if command is None:
            return {"status": "ok"}
        prefix = ""
        if state_container.settings.at_the_user and message.chat.type != "private":
            prefix = _mention(message.from_user) + " "
        background_tasks.add_task(
            run_command, state_container, command, message.chat.id, prefix
        )
        return {"status": "ok"}

    return app


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


def _resolve_target(message: TelegramMessage) -> TelegramUser | None:
    """Return the user a command points at: reply author, then text mention."""
    reply = message.reply_to_message
    if reply is not None and reply.from_user is not None:
        return reply.from_user
    for entity in message.entities or []:
        if entity.type == "text_mention" and entity.user is not None:
            return entity.user
    return None


def _strip_text_mentions(message: TelegramMessage) -> str:
    """Remove text_mention spans, whose offsets count UTF-16 code units."""
    text = message.text or ""
    spans = [
        (entity.offset, entity.offset + entity.length)
        for entity in message.entities or []
        if entity.type == "text_mention"
    ]
    if not spans:
        return text
    encoded = text.encode("utf-16-le")
    for start, end in sorted(spans, reverse=True):
        encoded = encoded[: start * 2] + b" \x00" + encoded[end * 2 :]
    return encoded.decode("utf-16-le")


def _mention(user: TelegramUser) -> str:
    if user.username:
        return f"@{user.username}"
    return user.first_name or str(user.id)
