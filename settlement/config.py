import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import URL

from settlement.errors import ConfigError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

DEFAULT_OTLP_ENDPOINT = "tempo:4317"


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("DB_USER")
    host = os.getenv("DB_HOST")
    name = os.getenv("DB_NAME")
    if not (user and host and name):
        raise ConfigError("DATABASE_URL is not set. Check your .env file.")
    url = URL.create(
        "mysql+pymysql",
        username=user,
        password=os.getenv("DB_PASSWORD", ""),
        host=host,
        port=3306,
        database=name,
    )
    # Password characters such as "@" or "/" are escaped in the rendered URL
    return url.render_as_string(hide_password=False)


@dataclass
class Settings:
    service_name: str
    database_url: str
    port: int
    otlp_endpoint: str = DEFAULT_OTLP_ENDPOINT
    order_service_url: Optional[str] = None
    payment_service_url: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, service_name: str, default_port: int) -> "Settings":
        # Force-load .env (reload-safe)
        load_dotenv(dotenv_path=ENV_PATH)

        otlp_endpoint = os.getenv("OTLP_ENDPOINT")
        if not otlp_endpoint:
            logger.info(f"OTLP_ENDPOINT is not set, using {DEFAULT_OTLP_ENDPOINT}")
            otlp_endpoint = DEFAULT_OTLP_ENDPOINT

        return cls(
            service_name=service_name,
            database_url=_database_url(),
            port=int(os.getenv("PORT", default_port)),
            otlp_endpoint=otlp_endpoint,
            order_service_url=os.getenv("ORDER_SERVICE") or None,
            payment_service_url=os.getenv("PAYMENT_SERVICE_URL") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
