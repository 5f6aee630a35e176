"""
config.py – Settings loaded from environment (.env supported).
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./foodpos.db"
    upload_dir: str = "./uploads"
    tax_rate: Decimal = Decimal("0")
    trust_client_totals: bool = True
    allow_transaction_delete: bool = False
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 12
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            upload_dir=os.getenv("UPLOAD_DIR", cls.upload_dir),
            tax_rate=Decimal(os.getenv("TAX_RATE", "0")),
            trust_client_totals=_flag("TRUST_CLIENT_TOTALS", True),
            allow_transaction_delete=_flag("ALLOW_TRANSACTION_DELETE", False),
            token_ttl_hours=int(os.getenv("TOKEN_TTL_HOURS", "24")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
