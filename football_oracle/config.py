"""
Oracle configuration loaded from environment variables (.env supported).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Size of a typical data feed unit, used as the cost of one publication
DEFAULT_UNIT_COST = 600
DEFAULT_MIN_AVAILABLE_OUTPUTS = 100
DEFAULT_RETRY_DELAY_SECONDS = 5 * 60
DEFAULT_RETRY_JITTER_SECONDS = 3
DEFAULT_FOOTBALL_DATA_URL = "http://api.football-data.org/v1/fixtures/?timeFrame=p3"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OracleConfig:
    """Immutable settings for one oracle process."""
    oracle_address: str = ""
    private_key: Optional[str] = None
    database_url: str = "sqlite:///oracle.sqlite"
    unit_cost: int = DEFAULT_UNIT_COST
    min_available_outputs: int = DEFAULT_MIN_AVAILABLE_OUTPUTS
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    retry_jitter_seconds: float = DEFAULT_RETRY_JITTER_SECONDS
    post_timestamp: bool = False
    admin_email: Optional[str] = None
    from_email: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    football_data_api_key: Optional[str] = None
    football_data_url: str = DEFAULT_FOOTBALL_DATA_URL

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "OracleConfig":
        """
        Build a config from environment variables.

        Args:
            env_file: Optional path to a .env file (default: search from cwd)
        """
        load_dotenv(env_file)

        return cls(
            oracle_address=os.getenv("ORACLE_ADDRESS", ""),
            private_key=os.getenv("ORACLE_PRIVATE_KEY"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///oracle.sqlite"),
            unit_cost=int(os.getenv("UNIT_COST", str(DEFAULT_UNIT_COST))),
            min_available_outputs=int(os.getenv(
                "MIN_AVAILABLE_OUTPUTS",
                os.getenv("MIN_AVAILABLE_WITNESSINGS", str(DEFAULT_MIN_AVAILABLE_OUTPUTS)),
            )),
            retry_delay_seconds=float(os.getenv("RETRY_DELAY_SECONDS", str(DEFAULT_RETRY_DELAY_SECONDS))),
            retry_jitter_seconds=float(os.getenv("RETRY_JITTER_SECONDS", str(DEFAULT_RETRY_JITTER_SECONDS))),
            post_timestamp=_env_bool("POST_TIMESTAMP"),
            admin_email=os.getenv("ADMIN_EMAIL"),
            from_email=os.getenv("FROM_EMAIL"),
            smtp_host=os.getenv("SMTP_HOST"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            football_data_api_key=os.getenv("FOOTBALL_DATA_API_KEY"),
            football_data_url=os.getenv("FOOTBALL_DATA_URL", DEFAULT_FOOTBALL_DATA_URL),
        )

    def validate(self) -> None:
        """Raise ConfigError if settings required to run the bot are missing."""
        if not self.admin_email or not self.from_email:
            raise ConfigError("please specify ADMIN_EMAIL and FROM_EMAIL in your .env")
        if not self.football_data_api_key:
            raise ConfigError("please specify FOOTBALL_DATA_API_KEY in your .env")
        if self.unit_cost <= 0:
            raise ConfigError(f"UNIT_COST must be positive, got {self.unit_cost}")
