"""
Errors surfaced to the client as ``errorMsg``.

Every other invalid request is dropped without feedback; the engine reports
those by returning False.
"""
from __future__ import annotations


class ChipTableError(Exception):
    """Base class for user-facing errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RoomNotFound(ChipTableError):
    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__("Room not found.")


class InvalidName(ChipTableError):
    def __init__(self) -> None:
        super().__init__("Enter a name.")


class SettlementSumMismatch(ChipTableError):
    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"Payments must add up to exactly {expected} (got {got}).")


class MalformedPayment(ChipTableError):
    def __init__(self) -> None:
        super().__init__("Invalid payment.")
