# config.py
import os
from datetime import timedelta

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _to_bool(val, default=False):
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _to_int(val, default):
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


class Config:
    # ── Core ─────────────────────────────────────────────────────────────────
    DEBUG = _to_bool(os.environ.get("FLASK_DEBUG"), False)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")  # override in prod
    PERMANENT_SESSION_LIFETIME = timedelta(hours=_to_int(os.environ.get("SESSION_HOURS"), 24))
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # ── Roster storage ──────────────────────────────────────────────────────
    # "file" keeps buses/students/tickets as JSON files in DATA_DIR,
    # "database" keeps them in the SQLAlchemy tables.
    ROSTER_BACKEND = os.environ.get("ROSTER_BACKEND", "file")
    DATA_DIR = os.environ.get("DATA_DIR", os.path.join(BASE_DIR, "data"))

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(DATA_DIR, "roster.db"),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # Copy committed student/bus changes into the database tables when the
    # file backend is the primary store. Failures are logged only.
    MIRROR_TO_DATABASE = _to_bool(os.environ.get("MIRROR_TO_DATABASE"), False)
    MIRROR_ASYNC = _to_bool(os.environ.get("MIRROR_ASYNC"), True)

    # Seed bulk-import seat counters from today's tickets as well as students
    IMPORT_SEED_INCLUDES_TICKETS = _to_bool(os.environ.get("IMPORT_SEED_INCLUDES_TICKETS"), False)

    # ── Uploads / forms ─────────────────────────────────────────────────────
    MAX_CONTENT_LENGTH = _to_int(os.environ.get("MAX_UPLOAD_MB"), 10) * 1024 * 1024
    # JSON API clients carry no CSRF token
    WTF_CSRF_ENABLED = _to_bool(os.environ.get("WTF_CSRF_ENABLED"), False)


class ProductionConfig(Config):
    DEBUG = False
    SECRET_KEY = os.environ.get("SECRET_KEY")


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = {}
    MIRROR_ASYNC = False


CONFIGS = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "testing": TestingConfig,
}


def config_for(name):
    """Config class for an APP_ENV value; unknown or unset names get the base Config"""
    return CONFIGS.get(str(name or "").strip().lower(), Config)
