"""
Name and input normalization shared by the engine.

Fighters are referenced by name inside the fight log and champion registry, so
every comparison goes through identity_key() to make "Alice", "alice" and
" Alice " the same fighter.
"""

from datetime import date, datetime
from typing import Union

from rankbot.constants import RecordConstants
from rankbot.database.models import Platform, FightMethod
from rankbot.utils.exceptions import (
    RecordsValidationError, FighterValidationError, FightValidationError
)


def canonical_name(name: str) -> str:
    """Strip and collapse whitespace runs."""
    return " ".join((name or "").split())


def identity_key(name: str) -> str:
    """Case-insensitive comparison key for a fighter name."""
    return canonical_name(name).casefold()


def is_draw(winner: str) -> bool:
    return identity_key(winner) == RecordConstants.DRAW.casefold()


def validate_fighter_name(name: str) -> str:
    """Return the canonical spelling of a new fighter name or raise."""
    cleaned = canonical_name(name)
    if not cleaned:
        raise FighterValidationError("Fighter name is empty", "❌ Fighter name cannot be empty!")
    if len(cleaned) > RecordConstants.MAX_NAME_LENGTH:
        raise FighterValidationError(
            f"Fighter name longer than {RecordConstants.MAX_NAME_LENGTH} characters",
            f"❌ Fighter names are limited to {RecordConstants.MAX_NAME_LENGTH} characters!"
        )
    if cleaned.casefold() in RecordConstants.RESERVED_NAMES:
        raise FighterValidationError(
            f"Fighter name '{cleaned}' is reserved",
            f"❌ **{cleaned}** is reserved and cannot be used as a fighter name!"
        )
    return cleaned


def parse_platform(value: Union[Platform, str]) -> Platform:
    """Accept Platform members, 'PC', 'pc' or the display form 'UFL PC'."""
    if isinstance(value, Platform):
        return value
    text = canonical_name(str(value)).upper()
    if text.startswith("UFL "):
        text = text[4:]
    try:
        return Platform(text)
    except ValueError:
        valid = ", ".join(p.value for p in Platform)
        raise RecordsValidationError(
            f"Unknown platform '{value}'",
            f"❌ Unknown platform **{value}**. Choose one of: {valid}"
        )


def parse_method(value: Union[FightMethod, str]) -> FightMethod:
    if isinstance(value, FightMethod):
        return value
    key = identity_key(str(value))
    for method in FightMethod:
        if method.value.casefold() == key:
            return method
    valid = ", ".join(m.value for m in FightMethod)
    raise FightValidationError(
        f"Unknown method '{value}'",
        f"❌ Unknown method **{value}**. Choose one of: {valid}"
    )


def parse_fight_date(value: Union[date, datetime, str]) -> date:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise FightValidationError(
            f"Invalid fight date '{value}'",
            f"❌ **{value}** is not a valid date. Use YYYY-MM-DD."
        )
