import logging
import logging.handlers
from pathlib import Path

from pydantic_settings import BaseSettings

from .database.url_repair import describe_provider, repair_database_url

_DEFAULT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    environment: str = "development"

    # Storage: empty URL means in-memory storage for the process lifetime
    database_url: str = ""
    database_connect_timeout: int = 10

    # Sessions
    secret_key: str = _DEFAULT_SECRET
    session_max_age: int = 86400 * 7

    # AI
    anthropic_api_key: str = ""
    ai_model: str = "claude-haiku-4-5-20251001"
    chat_daily_limit: int = 50
    redis_url: str = ""

    # Email (OTP delivery)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_sender_name: str = "Daily Tracker"

    # Domain knobs
    otp_ttl_minutes: int = 5
    task_duplicate_window_days: int = 5
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # HTTP
    cors_origins: str = "*"
    trusted_hosts: str = "*"
    rate_limit_auth: str = "20/minute"
    rate_limit_otp: str = "5/minute"
    rate_limit_chat: str = "30/minute"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10 MB
    log_backup_count: int = 5

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def effective_database_url(self) -> str:
        return repair_database_url(self.database_url)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def email_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def trusted_hosts_list(self) -> list[str]:
        return [h.strip() for h in self.trusted_hosts.split(",") if h.strip()]


settings = Settings()


def setup_logging() -> None:
    """Configure application-wide logging with rotating file handlers.

    Creates three handlers:
    - Console: INFO+ with brief format
    - app.log: DEBUG+ with detailed format, rotated at 10 MB x 5 backups
    - error.log: ERROR+ only, rotated at 10 MB x 5 backups
    """
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))
    root.addHandler(console)

    detail_fmt = logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app_handler = logging.handlers.RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    app_handler.setLevel(logging.DEBUG)
    app_handler.setFormatter(detail_fmt)
    root.addHandler(app_handler)

    err_handler = logging.handlers.RotatingFileHandler(
        log_dir / "error.log",
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    err_handler.setLevel(logging.ERROR)
    err_handler.setFormatter(detail_fmt)
    root.addHandler(err_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, dir=%s, max=%s MB x %d backups",
        settings.log_level, log_dir, settings.log_max_bytes // 1_048_576, settings.log_backup_count,
    )


def log_configuration_report(cfg: Settings) -> list[str]:
    """Log which optional integrations are configured. Returns the warnings."""
    logger = logging.getLogger(__name__)
    warnings: list[str] = []

    db_url = cfg.effective_database_url
    if db_url:
        logger.info("Database configured (provider=%s)", describe_provider(db_url))
    else:
        warnings.append("DATABASE_URL not set: data will NOT persist between restarts")

    if not cfg.email_configured:
        warnings.append("SMTP_USER/SMTP_PASSWORD not set: OTP emails cannot be delivered")
    if not cfg.anthropic_api_key:
        warnings.append("ANTHROPIC_API_KEY not set: chat and resume analysis are disabled")
    if cfg.secret_key == _DEFAULT_SECRET:
        warnings.append("Using default SECRET_KEY, set one for production")

    for message in warnings:
        logger.warning(message)
    logger.info("Running in %s mode", cfg.environment)
    return warnings
