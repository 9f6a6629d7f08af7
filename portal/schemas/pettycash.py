# schemas/pettycash.py
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Any
from decimal import Decimal
from datetime import datetime

from portal.models.pettycash import ApprovalStatus, EntryType, ReferenceType
from portal.utils.dates import to_naive_utc

# --- Categorias ---

class CategoryBase(BaseModel):
    code: str = Field(min_length=2, max_length=30)
    name: str = Field(min_length=2)
    description: Optional[str] = None
    max_per_transaction: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    requires_approval: bool = True
    order: int = 0

class CategoryCreate(CategoryBase):
    pass

class CategoryRead(CategoryBase):
    id: int
    active: bool

    class Config:
        from_attributes = True

# --- Configuracion del fondo ---

class FloatConfigUpsert(BaseModel):
    branch_id: int
    tier: Optional[str] = None
    base_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    min_trigger_pct: Decimal = Field(default=Decimal("0"), ge=0, le=100, max_digits=5, decimal_places=2)
    hard_cap: Decimal = Field(max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def cap_covers_base(self):
        if self.hard_cap < self.base_amount:
            raise ValueError("hard_cap must be greater than or equal to base_amount")
        return self

class FloatConfigRead(BaseModel):
    id: int
    branch_id: int
    tier: Optional[str] = None
    base_amount: Decimal
    min_trigger_pct: Decimal
    hard_cap: Decimal
    review_date: Optional[datetime] = None

    class Config:
        from_attributes = True

class FloatStatusRead(BaseModel):
    branch_id: int
    balance: Decimal
    base_amount: Decimal
    hard_cap: Decimal
    trigger_amount: Decimal
    needs_replenishment: bool
    suggested_replenishment: Decimal
    review_date: Optional[datetime] = None

# --- Bitacora ---

class LedgerEntryRead(BaseModel):
    id: int
    float_config_id: int
    entry_type: EntryType
    amount: Decimal
    running_balance: Decimal
    reference_type: ReferenceType
    reference_id: Optional[int] = None
    description: Optional[str] = None
    created_by_id: Optional[int] = None
    entry_date: datetime

    class Config:
        from_attributes = True

# --- Gastos ---

class TransactionCreate(BaseModel):
    branch_id: int
    category_id: int
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = None
    receipt_url: Optional[str] = None
    transaction_date: Optional[datetime] = None

    @field_validator("transaction_date")
    @classmethod
    def transaction_date_utc(cls, value):
        # Se guarda en UTC naive, igual que las fechas del servidor
        return to_naive_utc(value)

class RequesterRead(BaseModel):
    id: int
    full_name: Optional[str] = None
    position: Optional[str] = None

    class Config:
        from_attributes = True

class TransactionRead(BaseModel):
    id: int
    ledger_id: int
    category_id: int
    branch_id: int
    amount: Decimal
    description: Optional[str] = None
    receipt_url: Optional[str] = None
    transaction_date: datetime
    voucher_number: str
    requested_by_id: int
    status: ApprovalStatus
    approval_chain: List[str] = []
    approval_history: List[Any] = []
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    paid_by_id: Optional[int] = None
    paid_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    category: Optional[CategoryRead] = None
    requested_by: Optional[RequesterRead] = None

    class Config:
        from_attributes = True

class DecisionIn(BaseModel):
    reason: Optional[str] = None

# --- Reposiciones ---

class ReplenishmentCreate(BaseModel):
    branch_id: int
    requested_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    justification: Optional[str] = None

class ReplenishmentRead(BaseModel):
    id: int
    float_config_id: int
    requested_amount: Decimal
    current_balance: Decimal
    target_balance: Decimal
    justification: Optional[str] = None
    status: ApprovalStatus
    approval_chain: List[str] = []
    approval_history: List[Any] = []
    requested_by_id: Optional[int] = None
    decided_by_id: Optional[int] = None
    decided_at: Optional[datetime] = None
    ledger_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Arqueos ---

class CashCountCreate(BaseModel):
    branch_id: int
    counted_amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)  # Lo que se conto fisicamente
    witness_id: Optional[int] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    count_type: Optional[str] = "ROUTINE"

class CashCountRead(BaseModel):
    id: int
    float_config_id: int
    counted_amount: Decimal
    system_balance: Decimal
    variance: Decimal         # Sobrante (+) o Faltante (-)
    variance_pct: Decimal
    counter_id: int
    witness_id: Optional[int] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    count_type: Optional[str] = None
    resolved: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
