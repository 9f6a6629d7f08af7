import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.config import settings
from portal.crud import ledger
from portal.crud.ledger import to_money
from portal.exceptions import InsufficientFloat, InvalidState, NotFound, ValidationError
from portal.models import (
    ApprovalStatus, Branch, CashCount, EntryType, FloatConfig, PettyCashCategory,
    PettyCashTransaction, ReferenceType, ReplenishmentRequest, Role, User,
)
from portal.schemas.pettycash import (
    CashCountCreate, CategoryCreate, FloatConfigUpsert, ReplenishmentCreate, TransactionCreate,
)
from portal.utils.dates import to_naive_utc, utcnow
from portal.utils.vouchers import generate_voucher_number

logger = logging.getLogger(__name__)

TRANSACTION_APPROVAL_CHAIN = ["supervisor", "finance"]
REPLENISHMENT_APPROVAL_CHAIN = ["finance"]

# Estos roles ven las solicitudes de todos; el resto solo las propias
FULL_VIEW_ROLES = {Role.FINANCE, Role.SUPERADMIN}


def _history_item(user: User, action: ApprovalStatus, comment: Optional[str] = None) -> dict:
    return {
        "user_id": user.id,
        "role": user.role.value,
        "action": action.value,
        "at": utcnow().isoformat(),
        "comment": comment,
    }


def _ensure_pending(record, label: str):
    if record.status != ApprovalStatus.PENDING:
        raise InvalidState(f"{label} already {record.status.value.lower()}")


# --- Categorias ---

def list_categories(db: Session) -> List[PettyCashCategory]:
    return (
        db.query(PettyCashCategory)
        .filter(PettyCashCategory.active.is_(True))
        .order_by(PettyCashCategory.order.asc())
        .all()
    )


def create_category(db: Session, category_in: CategoryCreate) -> PettyCashCategory:
    if db.query(PettyCashCategory).filter(PettyCashCategory.code == category_in.code).first():
        raise ValidationError(f"Category code '{category_in.code}' already exists")

    category = PettyCashCategory(**category_in.model_dump(), active=True)
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Petty cash category %s created", category.code)
    return category


# --- Configuracion del fondo ---

def find_float_config(db: Session, branch_id: int) -> Optional[FloatConfig]:
    return db.query(FloatConfig).filter(FloatConfig.branch_id == branch_id).first()


def _apply_float_config(config: FloatConfig, config_in: FloatConfigUpsert):
    # review_date solo se fija al crear
    config.tier = config_in.tier
    config.base_amount = config_in.base_amount
    config.min_trigger_pct = config_in.min_trigger_pct
    config.hard_cap = config_in.hard_cap


def upsert_float_config(db: Session, config_in: FloatConfigUpsert) -> FloatConfig:
    branch = db.query(Branch).filter(Branch.id == config_in.branch_id).first()
    if not branch:
        raise NotFound("Branch not found")

    config = find_float_config(db, config_in.branch_id)
    created = config is None
    if created:
        config = FloatConfig(
            branch_id=config_in.branch_id,
            review_date=utcnow() + timedelta(days=settings.FLOAT_REVIEW_DAYS),
        )
        db.add(config)
    _apply_float_config(config, config_in)

    try:
        db.commit()
    except IntegrityError:
        # Otra solicitud creo el fondo de la sucursal primero: se actualiza ese
        db.rollback()
        config = find_float_config(db, config_in.branch_id)
        if config is None:
            raise
        created = False
        _apply_float_config(config, config_in)
        db.commit()

    db.refresh(config)
    logger.info(
        "Float config %s for branch %s (base=%s cap=%s)",
        "created" if created else "updated", config.branch_id, config.base_amount, config.hard_cap,
    )
    return config


def float_status(db: Session, branch_id: int) -> dict:
    config = ledger.get_float_config(db, branch_id)
    balance = ledger.current_balance(db, config)
    base = to_money(config.base_amount)
    trigger = to_money(base * Decimal(str(config.min_trigger_pct or 0)) / 100)
    return {
        "branch_id": branch_id,
        "balance": balance,
        "base_amount": base,
        "hard_cap": to_money(config.hard_cap),
        "trigger_amount": trigger,
        "needs_replenishment": balance <= trigger,
        "suggested_replenishment": max(base - balance, Decimal("0.00")),
        "review_date": config.review_date,
    }


# --- Gastos (transacciones) ---

def submit_transaction(db: Session, user: User, tx_in: TransactionCreate) -> PettyCashTransaction:
    """
    Registra un gasto de caja chica:
    valida fondo y categoria, descuenta de la bitacora y deja el gasto PENDIENTE.
    El descuento se aplica ya, antes de la aprobacion.
    """
    amount = to_money(tx_in.amount)
    try:
        # 1. Fondo de la sucursal (bloqueado hasta el commit)
        config = ledger.get_float_config(db, tx_in.branch_id, lock=True)

        # 2. Categoria
        category = db.query(PettyCashCategory).filter(
            PettyCashCategory.id == tx_in.category_id,
            PettyCashCategory.active.is_(True),
        ).first()
        if not category:
            raise NotFound("Category not found")
        if category.max_per_transaction is not None and amount > to_money(category.max_per_transaction):
            raise ValidationError(
                f"Amount exceeds the {category.code} limit of {to_money(category.max_per_transaction)}"
            )

        # 3. Saldo suficiente
        balance = ledger.current_balance(db, config)
        if balance < amount:
            raise InsufficientFloat("Insufficient float balance")

        # 4. Asiento DEBIT + gasto, en la misma transaccion
        entry = ledger.append_entry(
            db, config, EntryType.DEBIT, amount, ReferenceType.TRANSACTION,
            description=tx_in.description, created_by_id=user.id,
        )
        transaction = PettyCashTransaction(
            ledger_id=entry.id,
            category_id=category.id,
            branch_id=tx_in.branch_id,
            amount=amount,
            description=tx_in.description,
            receipt_url=tx_in.receipt_url,
            transaction_date=tx_in.transaction_date or utcnow(),
            voucher_number=generate_voucher_number(),
            requested_by_id=user.id,
            status=ApprovalStatus.PENDING,
            approval_chain=list(TRANSACTION_APPROVAL_CHAIN),
            approval_history=[],
        )
        db.add(transaction)
        db.flush()
        entry.reference_id = transaction.id

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info(
        "Transaction %s submitted by user %s on branch %s for %s",
        transaction.voucher_number, user.id, transaction.branch_id, amount,
    )
    return transaction


def list_transactions(
    db: Session,
    user: User,
    status: Optional[ApprovalStatus] = None,
    branch_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[PettyCashTransaction]:
    query = db.query(PettyCashTransaction)
    if status:
        query = query.filter(PettyCashTransaction.status == status)
    if branch_id:
        query = query.filter(PettyCashTransaction.branch_id == branch_id)
    if start_date and end_date:
        query = query.filter(
            PettyCashTransaction.transaction_date >= to_naive_utc(start_date),
            PettyCashTransaction.transaction_date <= to_naive_utc(end_date),
        )
    if user.role not in FULL_VIEW_ROLES:
        query = query.filter(PettyCashTransaction.requested_by_id == user.id)

    return query.order_by(PettyCashTransaction.created_at.desc(), PettyCashTransaction.id.desc()).all()


def get_transaction(db: Session, transaction_id: int) -> PettyCashTransaction:
    transaction = db.query(PettyCashTransaction).filter(PettyCashTransaction.id == transaction_id).first()
    if not transaction:
        raise NotFound("Transaction not found")
    return transaction


def approve_transaction(db: Session, transaction_id: int, approver: User) -> PettyCashTransaction:
    # El saldo ya se desconto al enviar: aqui no se vuelve a validar
    transaction = get_transaction(db, transaction_id)
    _ensure_pending(transaction, "Transaction")

    now = utcnow()
    transaction.status = ApprovalStatus.APPROVED
    transaction.approved_by_id = approver.id
    transaction.approved_at = now
    transaction.paid_at = now
    transaction.paid_by_id = approver.id
    transaction.approval_history = [
        *(transaction.approval_history or []),
        _history_item(approver, ApprovalStatus.APPROVED),
    ]

    db.commit()
    db.refresh(transaction)
    logger.info("Transaction %s approved by user %s", transaction.voucher_number, approver.id)
    return transaction


def reject_transaction(
    db: Session, transaction_id: int, approver: User, reason: Optional[str] = None
) -> PettyCashTransaction:
    """
    Rechaza un gasto pendiente. El DEBIT original se queda en la bitacora,
    salvo que PETTYCASH_REVERSE_ON_REJECT este activo: entonces se agrega
    un CREDIT de reverso por el mismo monto.
    """
    try:
        transaction = get_transaction(db, transaction_id)
        _ensure_pending(transaction, "Transaction")

        transaction.status = ApprovalStatus.REJECTED
        transaction.rejection_reason = reason
        transaction.approval_history = [
            *(transaction.approval_history or []),
            _history_item(approver, ApprovalStatus.REJECTED, reason),
        ]

        if settings.PETTYCASH_REVERSE_ON_REJECT:
            config = ledger.get_float_config(db, transaction.branch_id, lock=True)
            ledger.append_entry(
                db, config, EntryType.CREDIT, transaction.amount, ReferenceType.REVERSAL,
                reference_id=transaction.id,
                description=f"Reversal of {transaction.voucher_number}",
                created_by_id=approver.id,
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(transaction)
    logger.info("Transaction %s rejected by user %s", transaction.voucher_number, approver.id)
    return transaction


# --- Reposiciones ---

def request_replenishment(db: Session, user: User, req_in: ReplenishmentCreate) -> ReplenishmentRequest:
    config = ledger.get_float_config(db, req_in.branch_id)

    # Fotos del momento; no se recalculan despues
    request = ReplenishmentRequest(
        float_config_id=config.id,
        requested_amount=to_money(req_in.requested_amount),
        current_balance=ledger.current_balance(db, config),
        target_balance=to_money(config.base_amount),
        justification=req_in.justification,
        status=ApprovalStatus.PENDING,
        approval_chain=list(REPLENISHMENT_APPROVAL_CHAIN),
        approval_history=[],
        requested_by_id=user.id,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(
        "Replenishment %s requested for branch %s: %s (balance %s)",
        request.id, config.branch_id, request.requested_amount, request.current_balance,
    )
    return request


def list_replenishments(
    db: Session, branch_id: Optional[int] = None, status: Optional[ApprovalStatus] = None
) -> List[ReplenishmentRequest]:
    query = db.query(ReplenishmentRequest)
    if branch_id:
        query = query.join(FloatConfig).filter(FloatConfig.branch_id == branch_id)
    if status:
        query = query.filter(ReplenishmentRequest.status == status)
    return query.order_by(ReplenishmentRequest.created_at.desc(), ReplenishmentRequest.id.desc()).all()


def get_replenishment(db: Session, request_id: int) -> ReplenishmentRequest:
    request = db.query(ReplenishmentRequest).filter(ReplenishmentRequest.id == request_id).first()
    if not request:
        raise NotFound("Replenishment request not found")
    return request


def approve_replenishment(db: Session, request_id: int, approver: User) -> ReplenishmentRequest:
    """Aprueba y acredita el fondo. El saldo resultante no puede pasar el tope (hard_cap)."""
    try:
        request = get_replenishment(db, request_id)
        _ensure_pending(request, "Replenishment request")

        config = ledger.get_float_config(db, request.float_config.branch_id, lock=True)
        balance = ledger.current_balance(db, config)
        if balance + to_money(request.requested_amount) > to_money(config.hard_cap):
            raise ValidationError(
                f"Replenishment would exceed the branch hard cap of {to_money(config.hard_cap)}"
            )

        entry = ledger.append_entry(
            db, config, EntryType.CREDIT, request.requested_amount, ReferenceType.REPLENISHMENT,
            reference_id=request.id,
            description=request.justification,
            created_by_id=approver.id,
        )

        request.status = ApprovalStatus.APPROVED
        request.decided_by_id = approver.id
        request.decided_at = utcnow()
        request.ledger_id = entry.id
        request.approval_history = [
            *(request.approval_history or []),
            _history_item(approver, ApprovalStatus.APPROVED),
        ]
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    logger.info("Replenishment %s approved by user %s", request.id, approver.id)
    return request


def reject_replenishment(
    db: Session, request_id: int, approver: User, reason: Optional[str] = None
) -> ReplenishmentRequest:
    request = get_replenishment(db, request_id)
    _ensure_pending(request, "Replenishment request")

    request.status = ApprovalStatus.REJECTED
    request.decided_by_id = approver.id
    request.decided_at = utcnow()
    request.approval_history = [
        *(request.approval_history or []),
        _history_item(approver, ApprovalStatus.REJECTED, reason),
    ]
    db.commit()
    db.refresh(request)
    logger.info("Replenishment %s rejected by user %s", request.id, approver.id)
    return request


# --- Arqueos ---

def record_cash_count(db: Session, user: User, count_in: CashCountCreate) -> CashCount:
    config = ledger.get_float_config(db, count_in.branch_id)

    if count_in.witness_id is not None:
        if count_in.witness_id == user.id:
            raise ValidationError("Witness must be a different user than the counter")
        if not db.query(User).filter(User.id == count_in.witness_id).first():
            raise NotFound("Witness not found")

    # 1. Saldo segun sistema
    system_balance = ledger.current_balance(db, config)

    # 2. Diferencia (Real vs Esperado). Con saldo 0 el porcentaje se reporta en 0
    counted = to_money(count_in.counted_amount)
    variance = counted - system_balance
    if system_balance == 0:
        variance_pct = Decimal("0.00")
    else:
        variance_pct = to_money(variance / system_balance * 100)

    count = CashCount(
        float_config_id=config.id,
        counted_amount=counted,
        system_balance=system_balance,
        variance=variance,
        variance_pct=variance_pct,
        counter_id=user.id,
        witness_id=count_in.witness_id,
        photo_url=count_in.photo_url,
        notes=count_in.notes,
        count_type=count_in.count_type,
        resolved=abs(variance) < settings.CASH_COUNT_TOLERANCE,
    )
    db.add(count)
    db.commit()
    db.refresh(count)

    log = logger.info if count.resolved else logger.warning
    log(
        "Cash count on branch %s: counted=%s system=%s variance=%s",
        config.branch_id, counted, system_balance, variance,
    )
    return count


def list_cash_counts(db: Session, branch_id: Optional[int] = None) -> List[CashCount]:
    query = db.query(CashCount)
    if branch_id:
        query = query.join(FloatConfig).filter(FloatConfig.branch_id == branch_id)
    return query.order_by(CashCount.created_at.desc(), CashCount.id.desc()).all()
