import secrets
import string
from datetime import datetime, timezone
from typing import Optional

_ALPHABET = string.digits + string.ascii_lowercase


def generate_voucher_number(now: Optional[datetime] = None) -> str:
    """
    Folio de comprobante de caja chica: PC-<epoch ms>-<9 caracteres base36>.
    No es consecutivo por sucursal; la columna voucher_number es UNIQUE.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"PC-{millis}-{suffix}"
