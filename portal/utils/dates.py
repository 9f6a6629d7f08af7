from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """UTC naive: SQLite devuelve fechas sin tz, asi comparamos peras con peras."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Fechas con zona horaria se pasan a UTC naive; las naive se toman como UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
