# portal/routers/pettycash.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from portal.crud import ledger
from portal.crud import pettycash as crud_pc
from portal.database import get_db
from portal.models import ApprovalStatus, Role, User
from portal.schemas.pettycash import (
    CashCountCreate, CashCountRead, CategoryCreate, CategoryRead, DecisionIn,
    FloatConfigRead, FloatConfigUpsert, FloatStatusRead, LedgerEntryRead,
    ReplenishmentCreate, ReplenishmentRead, TransactionCreate, TransactionRead,
)
from portal.security import get_current_user, require_roles
from portal.utils.pdf_generator import generate_voucher_pdf

router = APIRouter()

# Grupos de roles por endpoint
FINANCE = (Role.FINANCE, Role.SUPERADMIN)
BRANCH_OPS = (Role.BRANCH_MANAGER, Role.FINANCE, Role.SUPERADMIN)


# --- 1. CATEGORIAS ---

@router.get("/categories", response_model=List[CategoryRead])
def read_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_pc.list_categories(db)

@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    return crud_pc.create_category(db, category_in)


# --- 2. GASTOS ---

@router.post("/transactions", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
def submit_transaction(
    tx_in: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Registra un gasto: descuenta del fondo y queda pendiente de aprobacion."""
    return crud_pc.submit_transaction(db, current_user, tx_in)

@router.get("/transactions", response_model=List[TransactionRead])
def read_transactions(
    status: Optional[ApprovalStatus] = None,
    branch_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud_pc.list_transactions(
        db, current_user, status=status, branch_id=branch_id,
        start_date=start_date, end_date=end_date,
    )

@router.get("/transactions/{transaction_id}/voucher")
def download_voucher(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Comprobante en PDF (solicitante, finanzas o superadmin)."""
    transaction = crud_pc.get_transaction(db, transaction_id)
    if current_user.role not in FINANCE and transaction.requested_by_id != current_user.id:
        raise HTTPException(status_code=403, detail="Forbidden")

    return Response(
        content=generate_voucher_pdf(transaction),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={transaction.voucher_number}.pdf"}
    )

@router.post("/transactions/{transaction_id}/approve", response_model=TransactionRead)
def approve_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    return crud_pc.approve_transaction(db, transaction_id, current_user)

@router.post("/transactions/{transaction_id}/reject", response_model=TransactionRead)
def reject_transaction(
    transaction_id: int,
    decision: Optional[DecisionIn] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    reason = decision.reason if decision else None
    return crud_pc.reject_transaction(db, transaction_id, current_user, reason)


# --- 3. FONDO Y BITACORA ---

@router.post("/float-config", response_model=FloatConfigRead)
def upsert_float_config(
    config_in: FloatConfigUpsert,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    return crud_pc.upsert_float_config(db, config_in)

@router.get("/float-status/{branch_id}", response_model=FloatStatusRead)
def read_float_status(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    """Saldo vigente contra el fondo base y el umbral de reposicion."""
    return crud_pc.float_status(db, branch_id)

@router.get("/ledger/{branch_id}", response_model=List[LedgerEntryRead])
def read_ledger(
    branch_id: int,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    config = ledger.get_float_config(db, branch_id)
    return ledger.list_entries(db, config, limit=limit)


# --- 4. REPOSICIONES ---

@router.post("/replenishment", response_model=ReplenishmentRead, status_code=status.HTTP_201_CREATED)
def request_replenishment(
    req_in: ReplenishmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    return crud_pc.request_replenishment(db, current_user, req_in)

@router.get("/replenishment", response_model=List[ReplenishmentRead])
def read_replenishments(
    branch_id: Optional[int] = None,
    status: Optional[ApprovalStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    return crud_pc.list_replenishments(db, branch_id=branch_id, status=status)

@router.post("/replenishment/{request_id}/approve", response_model=ReplenishmentRead)
def approve_replenishment(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    return crud_pc.approve_replenishment(db, request_id, current_user)

@router.post("/replenishment/{request_id}/reject", response_model=ReplenishmentRead)
def reject_replenishment(
    request_id: int,
    decision: Optional[DecisionIn] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*FINANCE))
):
    reason = decision.reason if decision else None
    return crud_pc.reject_replenishment(db, request_id, current_user, reason)


# --- 5. ARQUEOS ---

@router.post("/cash-count", response_model=CashCountRead, status_code=status.HTTP_201_CREATED)
def record_cash_count(
    count_in: CashCountCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    return crud_pc.record_cash_count(db, current_user, count_in)

@router.get("/cash-count", response_model=List[CashCountRead])
def read_cash_counts(
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*BRANCH_OPS))
):
    return crud_pc.list_cash_counts(db, branch_id=branch_id)
