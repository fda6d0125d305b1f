import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DB_URL", "sqlite:///stockroom.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecret")

    # "database" persists collections in the storage_entry table, "memory"
    # keeps them for the lifetime of the process only.
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "database")
    SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA")

    LOG_DIR = os.getenv("LOG_DIR", "")

    LOW_STOCK_PREVIEW_LIMIT = int(os.getenv("LOW_STOCK_PREVIEW_LIMIT", 10))
    RECENT_TRANSACTIONS_LIMIT = int(os.getenv("RECENT_TRANSACTIONS_LIMIT", 5))
