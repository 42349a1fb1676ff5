import os
from pathlib import Path


class Settings:
    """Application settings with environment variable overrides."""

    APP_NAME: str = "Fleet Management Portal"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
    DB_PATH: Path = DATA_DIR / "fleet_portal.db"

    # Ledger receipt images
    RECEIPTS_DIR: Path = Path(os.getenv("RECEIPTS_DIR", str(DATA_DIR / "receipts")))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"sqlite+aiosqlite:///{DB_PATH}",
    )

    # Auth
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", "dev-secret-change-in-prod")
    SESSION_COOKIE_NAME: str = "fleet_session"
    SESSION_MAX_AGE: int = 86400  # 24 hours
    DEFAULT_ADMIN_EMAIL: str = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@fleet.local")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin")

    # CORS
    ALLOWED_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost").split(",")
        if o.strip()
    ]

    # Business constants
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200
    DEFAULT_PAYMENT_STATUSES: list[tuple[str, str]] = [
        ("To Pay", "#f59e0b"),
        ("Paid", "#22c55e"),
        ("Partial", "#3b82f6"),
        ("Overdue", "#ef4444"),
    ]
    TO_PAY_STATUS: str = "To Pay"


settings = Settings()
