"""
Custom exceptions for the records engine with user-friendly error messages.

Validation errors are raised before anything is written, so a caller that
catches one can assume the store was left untouched.
"""

class RecordsException(Exception):
    """Base exception for records-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class RecordsValidationError(RecordsException):
    """Base class for errors detected before any mutation is applied."""

class DuplicateIdentityError(RecordsValidationError):
    """Raised when an add or rename collides with an existing (name, platform)."""
    def __init__(self, name: str, platform: str):
        self.name = name
        self.platform = platform
        super().__init__(
            f"Fighter '{name}' already exists on {platform}",
            f"❌ A fighter named **{name}** already exists on {platform}!"
        )

class InvalidReferenceError(RecordsValidationError):
    """Raised when a fight, champion or rename refers to something that does not exist."""
    def __init__(self, reference: str, platform: str = None):
        self.reference = reference
        self.platform = platform
        where = f" on {platform}" if platform else ""
        super().__init__(
            f"Unknown reference '{reference}'{where}",
            f"❌ **{reference}** was not found{where}!"
        )

class SelfFightError(RecordsValidationError):
    """Raised when a fight names the same fighter twice."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Fight names '{name}' on both sides",
            f"❌ **{name}** cannot fight themselves!"
        )

class InconsistentMethodError(RecordsValidationError):
    """Raised when method == Draw and winner == Draw disagree."""
    def __init__(self, method: str, winner: str):
        self.method = method
        self.winner = winner
        super().__init__(
            f"Method '{method}' is inconsistent with winner '{winner}'",
            "❌ A fight is a draw only when both the method and the winner say Draw!"
        )

class FighterValidationError(RecordsValidationError):
    """Raised when fighter input is malformed."""

class FightValidationError(RecordsValidationError):
    """Raised when fight input is malformed."""

class StoreUnavailableError(RecordsException):
    """Raised when the backing store cannot complete a read or write."""
    def __init__(self, operation: str, details: str = None):
        self.operation = operation
        super().__init__(
            f"Store unavailable during {operation}: {details}",
            "❌ The records database is unavailable. Please try again later."
        )

class AdminAuthError(RecordsException):
    """Raised when the shared admin secret does not match."""
    def __init__(self):
        super().__init__(
            "Admin secret rejected",
            "❌ Incorrect admin password."
        )
