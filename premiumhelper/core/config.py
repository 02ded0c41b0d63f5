"""Application configuration management."""

import os
from pathlib import Path

from pydantic import BaseModel, Field


DEFAULT_AI_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_AI_MODEL = "gpt-3.5-turbo"


class AIConfig(BaseModel):
    """Settings for the outbound chat-completion endpoint."""

    endpoint: str = DEFAULT_AI_ENDPOINT
    api_key: str = ""
    model: str = DEFAULT_AI_MODEL
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    timeout_seconds: float = 60.0

    @property
    def is_configured(self) -> bool:
        """Whether an API key has been provided."""
        return bool(self.api_key.strip())


class AppConfig(BaseModel):
    """Application-wide configuration.

    These settings come from environment variables or defaults.
    Venue, role and subscription records live in the JSON data file.
    """

    # Paths
    base_dir: Path = Field(default_factory=lambda: Path.cwd())
    data_file: Path = Field(default=None)
    plugins_dir: Path = Field(default=None)
    log_file: Path | None = None

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    base_url: str = ""
    log_level: str = "INFO"

    # Outbound AI service
    ai: AIConfig = Field(default_factory=AIConfig)

    def __init__(self, **data):
        super().__init__(**data)
        # Set derived paths if not provided
        if self.data_file is None:
            self.data_file = self.base_dir / "data" / "directory.json"
        if self.plugins_dir is None:
            self.plugins_dir = self.base_dir / "plugins"

    @classmethod
    def from_env(cls, base_dir: Path | None = None) -> "AppConfig":
        """Create configuration from environment variables.

        Args:
            base_dir: Base directory for the application.

        Returns:
            AppConfig instance.

        Raises:
            ValueError: If environment variable values are invalid.
        """
        if base_dir is None:
            base_dir = Path(os.getenv("PREMIUMHELPER_BASE_DIR", Path.cwd()))

        def get_int_env(name: str, default: int, min_val: int, max_val: int) -> int:
            """Parse and validate integer environment variable."""
            value_str = os.getenv(name, str(default))
            try:
                value = int(value_str)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got: {value_str}")
            if value < min_val or value > max_val:
                raise ValueError(f"{name} must be between {min_val} and {max_val}, got: {value}")
            return value

        def get_float_env(name: str, default: float, min_val: float, max_val: float) -> float:
            """Parse and validate float environment variable."""
            value_str = os.getenv(name, str(default))
            try:
                value = float(value_str)
            except ValueError:
                raise ValueError(f"{name} must be a number, got: {value_str}")
            if value < min_val or value > max_val:
                raise ValueError(f"{name} must be between {min_val} and {max_val}, got: {value}")
            return value

        port = get_int_env("PREMIUMHELPER_PORT", 8000, 1, 65535)
        max_tokens = get_int_env("PREMIUMHELPER_AI_MAX_TOKENS", 1000, 1, 32000)
        temperature = get_float_env("PREMIUMHELPER_AI_TEMPERATURE", 0.7, 0.0, 2.0)
        timeout = get_float_env("PREMIUMHELPER_AI_TIMEOUT", 60.0, 1.0, 600.0)

        data: dict = {
            "base_dir": base_dir,
            "host": os.getenv("PREMIUMHELPER_HOST", "127.0.0.1"),
            "port": port,
            "debug": os.getenv("PREMIUMHELPER_DEBUG", "false").lower() == "true",
            "base_url": os.getenv("PREMIUMHELPER_BASE_URL", "").rstrip("/"),
            "log_level": os.getenv("PREMIUMHELPER_LOG_LEVEL", "INFO"),
            "ai": AIConfig(
                endpoint=os.getenv("PREMIUMHELPER_AI_ENDPOINT", DEFAULT_AI_ENDPOINT),
                api_key=os.getenv("PREMIUMHELPER_AI_API_KEY", ""),
                model=os.getenv("PREMIUMHELPER_AI_MODEL", DEFAULT_AI_MODEL),
                temperature=temperature,
                max_tokens=max_tokens,
                timeout_seconds=timeout,
            ),
        }

        data_file = os.getenv("PREMIUMHELPER_DATA_FILE")
        if data_file:
            data["data_file"] = Path(data_file)
        log_file = os.getenv("PREMIUMHELPER_LOG_FILE")
        if log_file:
            data["log_file"] = Path(log_file)

        return cls(**data)
