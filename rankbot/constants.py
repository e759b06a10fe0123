"""
Bot-wide constants for the UFL records bot.

This module contains the scoring weights, sentinels and display values used
throughout the codebase.
"""

class ScoringConstants:
    """Constants for the contender score."""

    # score = 5*wins - 2*losses + 2*ko_wins
    WIN_POINTS = 5
    LOSS_PENALTY = 2
    KO_WIN_POINTS = 2

    # Added once per win inside the recency window (cumulative, uncapped)
    RECENT_WIN_BONUS = 2

class RecordConstants:
    """Constants for fight records."""

    # Sentinel stored in Fight.winner for drawn fights
    DRAW = "Draw"

    # Names a fighter cannot take
    RESERVED_NAMES = frozenset({"draw"})

    MAX_NAME_LENGTH = 100

class UIConstants:
    """Constants for Discord UI elements."""

    # Embed colors
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    CHAMPION_COLOR = 0xffd700       # Gold
    ERROR_COLOR = 0xe74c3c          # Red
    SUCCESS_COLOR = 0x2ecc71        # Green
    WARNING_COLOR = 0xf39c12        # Orange

    CROWN_EMOJI = "👑"
    GLOVE_EMOJI = "🥊"
    TROPHY_EMOJI = "🏆"

    # Discord embed field limit is 1024 chars; keep search listings short
    MAX_SEARCH_RESULTS = 20
