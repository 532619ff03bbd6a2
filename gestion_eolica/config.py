import os
from datetime import timedelta
from pathlib import Path

from sqlalchemy.pool import StaticPool


BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent


def _bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def engine_options(uri: str) -> dict[str, object]:
    options: dict[str, object] = {"pool_pre_ping": True}
    if uri.startswith("sqlite:"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in uri or uri in {"sqlite://", "sqlite:///"}:
            # Una sola conexión compartida para que todas las sesiones vean la misma BD
            options["poolclass"] = StaticPool
    return options


class Config:
    APP_NAME = "Gestion-Eolica"
    TESTING = False
    DEBUG = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
        default_sqlite_path = PROJECT_ROOT / "instance" / "eolica.db"
        default_sqlite_uri = f"sqlite:///{default_sqlite_path}"
        self.DATABASE_URL = os.getenv("DATABASE_URL", default_sqlite_uri)
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        self.SQLALCHEMY_TRACK_MODIFICATIONS = False
        self.SQLALCHEMY_ENGINE_OPTIONS = engine_options(self.SQLALCHEMY_DATABASE_URI)
        self.RATELIMIT_STORAGE_URI = os.getenv(
            "RATELIMIT_STORAGE_URI", os.getenv("REDIS_URL", "memory://")
        )
        self.RATELIMIT_ENABLED = _bool_env("RATELIMIT_ENABLED", True)
        self.LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "100 per 15 minutes")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
        self.JWT_TTL = timedelta(seconds=_int_env("JWT_TTL_SECONDS", 4 * 3600))
        self.LOGIN_MAX_ATTEMPTS = _int_env("LOGIN_MAX_ATTEMPTS", 5)
        self.LOGIN_LOCK_MINUTES = _int_env("LOGIN_LOCK_MINUTES", 15)
        self.ALERT_BATTERY_MIN = _int_env("ALERT_BATTERY_MIN", 20)
        self.ALERT_VOLTAGE_MIN = _int_env("ALERT_VOLTAGE_MIN", 10)
        self.APP_VERSION = os.getenv("APP_VERSION", "dev")
        self.DEBUG = _bool_env("DEBUG", self.DEBUG)


class DevelopmentConfig(Config):
    DEBUG = True

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = True


class ProductionConfig(Config):
    DEBUG = False

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = False

    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False
        self.SECRET_KEY = "test-secret-key-with-enough-length-123"
        self.DATABASE_URL = "sqlite:///:memory:"
        self.SQLALCHEMY_DATABASE_URI = self.DATABASE_URL
        self.SQLALCHEMY_ENGINE_OPTIONS = engine_options(self.SQLALCHEMY_DATABASE_URI)
        self.RATELIMIT_ENABLED = False
        self.BCRYPT_LOG_ROUNDS = 4


def load_config(env: str | None = None) -> Config:
    env_name = (env or os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "production").lower()

    if env is None and env_name in {"prod", "production"}:
        db_url_env = os.getenv("DATABASE_URL", "")
        running_ci = os.getenv("CI", "").lower() in {"true", "1"}
        if not running_ci and (not db_url_env or db_url_env.startswith("sqlite:")):
            env_name = "development"
    if env_name in {"test", "testing"}:
        cfg: Config = TestingConfig()
    elif env_name in {"prod", "production"}:
        cfg = ProductionConfig()
    elif env_name in {"dev", "development"}:
        cfg = DevelopmentConfig()
    else:
        cfg = Config()

    cfg.SQLALCHEMY_DATABASE_URI = cfg.DATABASE_URL
    cfg.SQLALCHEMY_ENGINE_OPTIONS = engine_options(cfg.SQLALCHEMY_DATABASE_URI)

    if (
        env_name in {"prod", "production"}
        and cfg.SQLALCHEMY_DATABASE_URI.startswith("sqlite:")
        and os.getenv("CI", "").lower() not in {"true", "1"}
    ):
        raise RuntimeError("DATABASE_URL no definido en producción (detectado sqlite)")

    return cfg
