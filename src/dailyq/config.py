"""Configuration management for DailyQ."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DAILYQ_HOME = Path(os.environ.get("DAILYQ_HOME", Path.home() / "dailyq"))
CONFIG_FILE = DAILYQ_HOME / "config" / "dailyq.conf"
DATA_DIR = DAILYQ_HOME / "data"


@dataclass
class Config:
    """DailyQ configuration."""

    timezone: str = "Asia/Seoul"
    store_file: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    openai_timeout: float = 30.0
    streak_lookback_days: int = 365
    month_labels: str = "en"
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)

    @property
    def store_path(self) -> Path:
        """Resolved path of the key-value store file."""
        if self.store_file:
            return Path(self.store_file).expanduser()
        return DATA_DIR / "store.json"


def _parse_value(raw: str) -> str:
    """Strip quotes and inline comments from a config value."""
    value = raw.strip()

    # Handle quoted values with inline comments: "value" # comment
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]

    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from dailyq.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _parse_value(value)

            match key:
                case "timezone":
                    config.timezone = value
                case "store_file":
                    config.store_file = value
                case "openai_api_key":
                    config.openai_api_key = value
                case "openai_model":
                    config.openai_model = value
                case "openai_timeout":
                    try:
                        config.openai_timeout = float(value)
                    except ValueError:
                        logger.warning(f"Invalid OPENAI_TIMEOUT: {value!r}")
                case "streak_lookback_days":
                    try:
                        config.streak_lookback_days = int(value)
                    except ValueError:
                        logger.warning(f"Invalid STREAK_LOOKBACK_DAYS: {value!r}")
                case "month_labels":
                    config.month_labels = value.lower()
                case "telegram_bot_token":
                    config.telegram_bot_token = value
                case "telegram_allowed_users":
                    try:
                        config.telegram_allowed_users = [
                            int(u.strip()) for u in value.split(",") if u.strip()
                        ]
                    except ValueError:
                        logger.warning(f"Invalid TELEGRAM_ALLOWED_USERS: {value!r}")

    if not config.openai_api_key:
        config.openai_api_key = os.environ.get("OPENAI_API_KEY", "")

    return config
