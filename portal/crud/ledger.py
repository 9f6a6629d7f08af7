"""Bitacora de caja chica por sucursal.

Reglas:
- Solo se insertan asientos; nunca se editan ni se borran.
- El saldo vigente es el running_balance del asiento mas reciente
  (entry_date desc, id desc). Sin asientos, el saldo es base_amount.
- Cada asiento bloquea la fila FloatConfig de la sucursal y sube su version.

Nada aqui hace commit: el llamador decide cuando cerrar la transaccion.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from portal.exceptions import ConcurrencyConflict, NotFound, ValidationError
from portal.models import EntryType, FloatConfig, LedgerEntry, ReferenceType
from portal.utils.dates import utcnow

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS)


def get_float_config(db: Session, branch_id: int, lock: bool = False) -> FloatConfig:
    query = db.query(FloatConfig).filter(FloatConfig.branch_id == branch_id)
    if lock:
        # SELECT ... FOR UPDATE (en SQLite no aplica; ahi cuida la columna version)
        query = query.with_for_update()
    config = query.first()
    if not config:
        raise NotFound("Branch float not configured")
    return config


def latest_entry(db: Session, config: FloatConfig) -> Optional[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .filter(LedgerEntry.float_config_id == config.id)
        .order_by(LedgerEntry.entry_date.desc(), LedgerEntry.id.desc())
        .first()
    )


def current_balance(db: Session, config: FloatConfig) -> Decimal:
    entry = latest_entry(db, config)
    if entry is None:
        return to_money(config.base_amount)
    return to_money(entry.running_balance)


def append_entry(
    db: Session,
    config: FloatConfig,
    entry_type: EntryType,
    amount,
    reference_type: ReferenceType,
    reference_id: Optional[int] = None,
    description: Optional[str] = None,
    created_by_id: Optional[int] = None,
) -> LedgerEntry:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Ledger amount must be greater than 0")

    # 1. Saldo de partida (ultimo asiento o fondo base)
    baseline = current_balance(db, config)

    # 2. Nuevo saldo
    if entry_type == EntryType.DEBIT:
        new_balance = baseline - amount
    else:
        new_balance = baseline + amount

    # 3. Insertar asiento y marcar la config (dispara el control de version)
    entry = LedgerEntry(
        float_config_id=config.id,
        entry_type=entry_type,
        amount=amount,
        running_balance=new_balance,
        reference_type=reference_type,
        reference_id=reference_id,
        description=description,
        created_by_id=created_by_id,
        entry_date=utcnow(),
    )
    config.last_entry_at = entry.entry_date
    db.add(entry)
    try:
        db.flush()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent float update on config %s, append aborted", config.id)
        raise ConcurrencyConflict("Float balance changed concurrently, please retry")

    logger.info(
        "Ledger %s %s on branch %s: %s -> %s (%s)",
        entry_type.value, amount, config.branch_id, baseline, new_balance, reference_type.value,
    )
    return entry


def list_entries(db: Session, config: FloatConfig, limit: int = 100) -> List[LedgerEntry]:
    return (
        db.query(LedgerEntry)
        .filter(LedgerEntry.float_config_id == config.id)
        .order_by(LedgerEntry.entry_date.desc(), LedgerEntry.id.desc())
        .limit(limit)
        .all()
    )
