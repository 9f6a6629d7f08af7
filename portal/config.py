# portal/config.py
import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# .env en la raiz del proyecto (opcional)
project_root = Path(__file__).resolve().parent.parent
load_dotenv(project_root / ".env")


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    # Base de datos
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./portal.db")

    # JWT
    SECRET_KEY = os.environ.get("SECRET_KEY", "portal_secret_key_change_me_in_prod")
    ALGORITHM = os.environ.get("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 8)))

    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()]

    # Logging
    LOG_DIR = os.environ.get("LOG_DIR", str(project_root / "logs"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Caja chica
    FLOAT_REVIEW_DAYS = int(os.environ.get("FLOAT_REVIEW_DAYS", "90"))
    CASH_COUNT_TOLERANCE = Decimal(os.environ.get("CASH_COUNT_TOLERANCE", "100"))
    PETTYCASH_REVERSE_ON_REJECT = _flag("PETTYCASH_REVERSE_ON_REJECT")


settings = Settings()
