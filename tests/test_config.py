import pytest
from sqlalchemy.engine import make_url

from settlement.config import DEFAULT_OTLP_ENDPOINT, Settings
from settlement.errors import ConfigError

ENV_VARS = [
    "DATABASE_URL", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_NAME",
    "OTLP_ENDPOINT", "ORDER_SERVICE", "PAYMENT_SERVICE_URL", "PORT", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, mocker):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    mocker.patch("settlement.config.load_dotenv")


def test_database_url_composed_from_db_vars(monkeypatch):
    monkeypatch.setenv("DB_USER", "svc")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    monkeypatch.setenv("DB_HOST", "mysql")
    monkeypatch.setenv("DB_NAME", "orders")

    settings = Settings.from_env("order-service", default_port=8090)

    assert settings.database_url == "mysql+pymysql://svc:pw@mysql:3306/orders"
    assert settings.port == 8090
    assert settings.otlp_endpoint == DEFAULT_OTLP_ENDPOINT
    assert settings.payment_service_url is None


def test_explicit_settings(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///payments.db")
    monkeypatch.setenv("ORDER_SERVICE", "http://order-service:8090")
    monkeypatch.setenv("OTLP_ENDPOINT", "collector:4317")
    monkeypatch.setenv("PORT", "9000")

    settings = Settings.from_env("payment-service", default_port=8091)

    assert settings.database_url == "sqlite:///payments.db"
    assert settings.order_service_url == "http://order-service:8090"
    assert settings.otlp_endpoint == "collector:4317"
    assert settings.port == 9000


def test_missing_store_configuration_is_config_error():
    with pytest.raises(ConfigError):
        Settings.from_env("order-service", default_port=8090)


def test_database_password_is_escaped(monkeypatch):
    monkeypatch.setenv("DB_USER", "svc")
    monkeypatch.setenv("DB_PASSWORD", "p@ss/w%rd:1")
    monkeypatch.setenv("DB_HOST", "mysql")
    monkeypatch.setenv("DB_NAME", "orders")

    url = make_url(Settings.from_env("order-service", default_port=8090).database_url)

    assert url.host == "mysql"
    assert url.port == 3306
    assert url.username == "svc"
    assert url.password == "p@ss/w%rd:1"
    assert url.database == "orders"
