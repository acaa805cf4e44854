"""Errors raised by menu operations."""


class MenuError(Exception):
    """Base error whose message is safe to show to the requester."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentFormatError(MenuError):
    """Raised when food tokens don't follow the name(weight) grammar."""


class InvalidWeightError(MenuError):
    """Raised when an entry weight is not strictly positive."""


class UnknownTargetError(MenuError):
    """Raised when a referenced user or category can't be resolved."""
