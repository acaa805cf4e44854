"""Prompt-and-wait confirmation for destructive menu operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass, field
from enum import Enum

_logger = logging.getLogger(__name__)


class ConfirmationState(Enum):
    """States of a single confirmation request."""

    IDLE = "IDLE"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    TIMED_OUT = "TIMED_OUT"


@dataclass
class ConfirmationGate:
    """Wait for the requester's next reply before a destructive operation.

    Each requester has at most one pending request. The reply is delivered
    by the host through ``resolve``; the waiting side never blocks the event
    loop and gives up after ``timeout_seconds``.
    """

    timeout_seconds: float = 15.0
    _pending: dict[str, asyncio.Future[str]] = field(default_factory=dict)

    def is_pending(self, requester: str) -> bool:
        """Return True while a request from the requester awaits a reply."""
        return requester in self._pending

    def state(self, requester: str) -> ConfirmationState:
        if self.is_pending(requester):
            return ConfirmationState.AWAITING_CONFIRMATION
        return ConfirmationState.IDLE

    async def request(
        self,
        requester: str,
        prompt: str,
        tokens: Collection[str],
        send: Callable[[str], Awaitable[None]],
    ) -> ConfirmationState:
        """Send the prompt and wait for a reply matching one of the tokens."""
        previous = self._pending.pop(requester, None)
        if previous is not None and not previous.done():
            previous.set_result("")

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending[requester] = future
        try:
            await send(prompt)
            reply = await asyncio.wait_for(future, timeout=self.timeout_seconds)
        except TimeoutError:
            _logger.info("Confirmation timed out: requester=%s", requester)
            return ConfirmationState.TIMED_OUT
        finally:
            if self._pending.get(requester) is future:
                del self._pending[requester]

        if reply.strip() in tokens:
            _logger.info("Confirmation accepted: requester=%s", requester)
            return ConfirmationState.CONFIRMED
        _logger.info("Confirmation rejected: requester=%s", requester)
        return ConfirmationState.REJECTED

    def resolve(self, requester: str, text: str) -> bool:
        """Deliver a reply to the requester's pending request, if any."""
        future = self._pending.pop(requester, None)
        if future is None or future.done():
            return False
        future.set_result(text)
        return True
