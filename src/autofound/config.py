"""Configuration settings for the application."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    DEBUG: bool = True
    DATA_DIR: str = "/data"
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical

    # Agent loop limits
    MAX_TOOL_ITERATIONS: int = 10
    MAX_AGENT_DEPTH: int = 3
    MAX_OUTPUT_TOKENS: int = 1024
    HTTP_TIMEOUT: float = 60.0
    CHAT_HISTORY_LIMIT: int = 20

    # LLM Configuration
    DEFAULT_MODEL: str = "gpt-4o-mini"
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION: str = "2023-06-01"
    GOOGLE_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None
    GOOGLE_API_KEY: str | None = None

    # Other API Keys
    TAVILY_API_KEY: str | None = None
    TAVILY_API_URL: str = "https://api.tavily.com/search"

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
