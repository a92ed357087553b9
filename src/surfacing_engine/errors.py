"""
Engine Errors
=============

Exception types raised by the surfacing engine's validation helpers and
session layer.

The engine itself never lets these escape ``decide``: invalid input is
converted into an ``ignore`` decision. They surface only from loaders
and from the session registry.
"""

from typing import Any, Optional


class InvalidInput(ValueError):
    """
    A detection event failed validation.

    Attributes:
        field: Name of the offending field (``coord``, ``score``, ...)
        value: The rejected value, kept for logging
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class SessionNotFound(KeyError):
    """No session is registered for the requested mission id."""

    def __init__(self, mission_id: str) -> None:
        super().__init__(mission_id)
        self.mission_id = mission_id

    def __str__(self) -> str:
        return f"No session for mission: {self.mission_id}"
