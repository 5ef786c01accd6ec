"""Configuration module for Event Reminder Service.

This module provides configuration settings using Pydantic Settings.
Environment variables can be used to override default values.
"""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings for Event Reminder Service.

    All settings can be overridden via environment variables.
    Example: export DATABASE_URL="postgresql://..."
    """

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./events.db"
    """Database connection URL. Default: SQLite file in current directory"""

    # API Server Configuration
    API_HOST: str = "0.0.0.0"
    """API server host address"""

    API_PORT: int = 8005
    """API server port"""

    # MCP Server Configuration
    MCP_HOST: str = "127.0.0.1"
    """MCP server host address"""

    MCP_PORT: int = 8006
    """MCP server port for SSE transport (separate from REST API)"""

    MCP_TRANSPORT: str = "sse"
    """MCP transport type: 'stdio' for local, 'sse' for network access"""

    # General Configuration
    TIMEZONE: str = "UTC"
    """Timezone used to decide which calendar day "today" is"""

    MAX_EVENTS_PER_USER: int = 1000
    """Maximum number of events allowed per user"""

    DEFAULT_REMINDERS: List[int] = [30, 15, 7, 3, 1]
    """Lead times (days before) applied when an event is created without any"""

    # Message Generation Configuration
    GEMINI_API_KEY: str = ""
    """API key for greeting-message generation (empty disables generation)"""

    GEMINI_MODEL: str = "gemini-2.0-flash"
    """Model used for greeting-message generation"""

    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    """Base URL of the generation API"""

    GENERATION_TIMEOUT: float = 30.0
    """Timeout in seconds for one generation request"""

    # Background Worker Configuration
    WORKER_ENABLED: bool = True
    """Enable/disable background worker for reminder notifications"""

    WORKER_CHECK_INTERVAL: int = 3600
    """Interval in seconds between reminder checks (default: hourly)"""

    NOTIFICATION_WEBHOOK_URL: str = ""
    """Webhook receiving reminder notifications (empty: log only)"""

    NOTIFICATION_MAX_RETRIES: int = 3
    """Delivery attempts per notification before giving up for the day"""

    class Config:
        """Pydantic config"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
