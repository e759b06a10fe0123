import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///ufl_records.db')

    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Admin access (single shared secret)
    ADMIN_SECRET = os.getenv('ADMIN_SECRET')
    ADMIN_SESSION_MINUTES = int(os.getenv('ADMIN_SESSION_MINUTES', 60))

    # Snapshot settings
    STORE_FALLBACK_CACHE = os.getenv('STORE_FALLBACK_CACHE', 'True').lower() == 'true'
    SNAPSHOT_TTL_SECONDS = int(os.getenv('SNAPSHOT_TTL_SECONDS', 60))

    # Ranking settings
    RANKING_SIZE = int(os.getenv('RANKING_SIZE', 15))
    RECENCY_WINDOW_DAYS = int(os.getenv('RECENCY_WINDOW_DAYS', 20))

    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.ADMIN_SECRET:
            raise ValueError("ADMIN_SECRET is required")
        if cls.RANKING_SIZE < 1:
            raise ValueError("RANKING_SIZE must be a positive integer")
        if cls.RECENCY_WINDOW_DAYS < 0:
            raise ValueError("RECENCY_WINDOW_DAYS cannot be negative")
