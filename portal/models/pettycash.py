# portal/models/pettycash.py
import enum
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Enum, JSON
)
from sqlalchemy.orm import relationship
from portal.database import Base
from portal.utils.dates import utcnow


class EntryType(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class ReferenceType(str, enum.Enum):
    TRANSACTION = "TRANSACTION"
    REPLENISHMENT = "REPLENISHMENT"
    REVERSAL = "REVERSAL"


class ApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PettyCashCategory(Base):
    __tablename__ = "pettycash_categories"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    max_per_transaction = Column(Numeric(12, 2), nullable=True)  # NULL = sin tope
    requires_approval = Column(Boolean, default=True)
    order = Column(Integer, default=0)
    active = Column(Boolean, default=True)


class FloatConfig(Base):
    """Politica del fondo fijo de una sucursal (uno por sucursal)."""
    __tablename__ = "float_configs"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), unique=True, nullable=False)

    tier = Column(String, nullable=True)
    base_amount = Column(Numeric(12, 2), nullable=False)
    min_trigger_pct = Column(Numeric(5, 2), default=0)
    hard_cap = Column(Numeric(12, 2), nullable=False)
    review_date = Column(DateTime, nullable=True)

    # Se toca en cada asiento: obliga a que el UPDATE pase por el control de version
    last_entry_at = Column(DateTime, nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    branch = relationship("Branch", back_populates="float_config")
    entries = relationship("LedgerEntry", back_populates="float_config")


class LedgerEntry(Base):
    """
    Bitacora de caja chica (solo insercion).
    running_balance = saldo despues de aplicar este asiento.
    """
    __tablename__ = "pettycash_ledger"

    id = Column(Integer, primary_key=True, index=True)
    float_config_id = Column(Integer, ForeignKey("float_configs.id"), nullable=False, index=True)

    entry_type = Column(Enum(EntryType), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    running_balance = Column(Numeric(12, 2), nullable=False)

    reference_type = Column(Enum(ReferenceType), nullable=False)
    reference_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    entry_date = Column(DateTime, default=utcnow, nullable=False, index=True)

    float_config = relationship("FloatConfig", back_populates="entries")


class PettyCashTransaction(Base):
    __tablename__ = "pettycash_transactions"

    id = Column(Integer, primary_key=True, index=True)
    ledger_id = Column(Integer, ForeignKey("pettycash_ledger.id"), unique=True, nullable=False)
    category_id = Column(Integer, ForeignKey("pettycash_categories.id"), nullable=False)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    receipt_url = Column(String, nullable=True)
    transaction_date = Column(DateTime, nullable=False)
    voucher_number = Column(String, unique=True, index=True, nullable=False)

    requested_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    approval_chain = Column(JSON, default=list)
    approval_history = Column(JSON, default=list)

    # Cierre
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    paid_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    paid_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    ledger_entry = relationship("LedgerEntry")
    category = relationship("PettyCashCategory")
    branch = relationship("Branch")
    requested_by = relationship("User", foreign_keys=[requested_by_id])


class ReplenishmentRequest(Base):
    __tablename__ = "pettycash_replenishments"

    id = Column(Integer, primary_key=True, index=True)
    float_config_id = Column(Integer, ForeignKey("float_configs.id"), nullable=False, index=True)

    requested_amount = Column(Numeric(12, 2), nullable=False)
    # Fotos al momento de la solicitud; no se recalculan
    current_balance = Column(Numeric(12, 2), nullable=False)
    target_balance = Column(Numeric(12, 2), nullable=False)
    justification = Column(Text, nullable=True)

    status = Column(Enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    approval_chain = Column(JSON, default=list)
    approval_history = Column(JSON, default=list)

    requested_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    decided_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    decided_at = Column(DateTime, nullable=True)
    ledger_id = Column(Integer, ForeignKey("pettycash_ledger.id"), nullable=True)

    created_at = Column(DateTime, default=utcnow)

    float_config = relationship("FloatConfig")


class CashCount(Base):
    """Arqueo fisico del fondo. Inmutable; no toca la bitacora."""
    __tablename__ = "pettycash_cash_counts"

    id = Column(Integer, primary_key=True, index=True)
    float_config_id = Column(Integer, ForeignKey("float_configs.id"), nullable=False, index=True)

    counted_amount = Column(Numeric(12, 2), nullable=False)
    system_balance = Column(Numeric(12, 2), nullable=False)
    variance = Column(Numeric(12, 2), nullable=False)        # contado - sistema
    variance_pct = Column(Numeric(9, 2), nullable=False)

    counter_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    witness_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    photo_url = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    count_type = Column(String, nullable=True)  # ROUTINE, SURPRISE, HANDOVER...
    resolved = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)

    float_config = relationship("FloatConfig")
