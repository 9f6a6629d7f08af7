from decimal import Decimal

import pytest

from portal.config import settings
from portal.crud import ledger
from portal.crud import pettycash as crud_pc
from portal.exceptions import InsufficientFloat, InvalidState, NotFound, ValidationError
from portal.models import (
    ApprovalStatus, EntryType, LedgerEntry, PettyCashCategory, PettyCashTransaction, ReferenceType, Role,
)
from portal.schemas.pettycash import TransactionCreate


def _tx(branch, category, amount, **kwargs):
    return TransactionCreate(
        branch_id=branch.id, category_id=category.id, amount=Decimal(amount),
        description=kwargs.pop("description", "Boda boda to head office"), **kwargs,
    )


def test_submit_debits_ledger_and_opens_pending_transaction(db, branch, float_config, category, staff):
    tx = crud_pc.submit_transaction(db, staff, _tx(branch, category, "1200"))

    assert tx.status == ApprovalStatus.PENDING
    assert tx.approval_chain == ["supervisor", "finance"]
    assert tx.approval_history == []
    assert tx.voucher_number.startswith("PC-")
    assert tx.requested_by_id == staff.id

    entries = db.query(LedgerEntry).all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.id == tx.ledger_id
    assert entry.entry_type == EntryType.DEBIT
    assert entry.reference_type == ReferenceType.TRANSACTION
    assert entry.reference_id == tx.id
    assert entry.running_balance == Decimal("8800.00")


def test_vouchers_differ_between_transactions(db, branch, float_config, category, staff):
    first = crud_pc.submit_transaction(db, staff, _tx(branch, category, "100"))
    second = crud_pc.submit_transaction(db, staff, _tx(branch, category, "100"))

    assert first.voucher_number != second.voucher_number
    assert ledger.current_balance(db, float_config) == Decimal("9800.00")


def test_insufficient_float_writes_nothing(db, branch, make_float, category, staff):
    config = make_float(branch.id, base="1000", cap="2000")

    with pytest.raises(InsufficientFloat):
        crud_pc.submit_transaction(db, staff, _tx(branch, category, "1500"))

    assert db.query(LedgerEntry).count() == 0
    assert db.query(PettyCashTransaction).count() == 0
    assert ledger.current_balance(db, config) == Decimal("1000.00")


def test_amount_equal_to_balance_is_allowed(db, branch, make_float, category, staff):
    config = make_float(branch.id, base="1000", cap="2000")

    crud_pc.submit_transaction(db, staff, _tx(branch, category, "1000"))

    assert ledger.current_balance(db, config) == Decimal("0.00")


def test_submit_without_float_config(db, branch, category, staff):
    with pytest.raises(NotFound, match="float not configured"):
        crud_pc.submit_transaction(db, staff, _tx(branch, category, "100"))


def test_category_limit_enforced(db, branch, float_config, category, staff):
    with pytest.raises(ValidationError):
        crud_pc.submit_transaction(db, staff, _tx(branch, category, "3000.01"))

    assert db.query(LedgerEntry).count() == 0


def test_inactive_category_not_found(db, branch, float_config, staff):
    retired = PettyCashCategory(code="OLD", name="Retired", active=False)
    db.add(retired)
    db.commit()

    with pytest.raises(NotFound):
        crud_pc.submit_transaction(db, staff, _tx(branch, retired, "10"))


def test_approve_stamps_approver_without_touching_balance(db, branch, float_config, category, staff, finance):
    tx = crud_pc.submit_transaction(db, staff, _tx(branch, category, "500"))

    approved = crud_pc.approve_transaction(db, tx.id, finance)

    assert approved.status == ApprovalStatus.APPROVED
    assert approved.approved_by_id == finance.id
    assert approved.paid_by_id == finance.id
    assert approved.approved_at is not None
    assert approved.paid_at is not None
    assert approved.approval_history[-1]["action"] == "APPROVED"
    assert approved.approval_history[-1]["role"] == "finance"
    assert ledger.current_balance(db, float_config) == Decimal("9500.00")
    assert db.query(LedgerEntry).count() == 1


def test_decided_transaction_is_terminal(db, branch, float_config, category, staff, finance):
    tx = crud_pc.submit_transaction(db, staff, _tx(branch, category, "500"))
    crud_pc.approve_transaction(db, tx.id, finance)

    with pytest.raises(InvalidState):
        crud_pc.approve_transaction(db, tx.id, finance)
    with pytest.raises(InvalidState):
        crud_pc.reject_transaction(db, tx.id, finance)


def test_reject_keeps_debit_by_default(db, branch, float_config, category, staff, finance):
    tx = crud_pc.submit_transaction(db, staff, _tx(branch, category, "700"))

    rejected = crud_pc.reject_transaction(db, tx.id, finance, "No receipt attached")

    assert rejected.status == ApprovalStatus.REJECTED
    assert rejected.rejection_reason == "No receipt attached"
    assert rejected.approval_history[-1]["comment"] == "No receipt attached"
    assert ledger.current_balance(db, float_config) == Decimal("9300.00")
    assert db.query(LedgerEntry).count() == 1


def test_reject_can_reverse_debit_when_enabled(db, branch, float_config, category, staff, finance, monkeypatch):
    monkeypatch.setattr(settings, "PETTYCASH_REVERSE_ON_REJECT", True)
    tx = crud_pc.submit_transaction(db, staff, _tx(branch, category, "700"))

    crud_pc.reject_transaction(db, tx.id, finance)

    reversal = ledger.latest_entry(db, float_config)
    assert reversal.entry_type == EntryType.CREDIT
    assert reversal.reference_type == ReferenceType.REVERSAL
    assert reversal.reference_id == tx.id
    assert ledger.current_balance(db, float_config) == Decimal("10000.00")


def test_list_transactions_scoped_to_requester(db, branch, float_config, category, make_user, finance):
    alice = make_user(Role.STAFF)
    bob = make_user(Role.STAFF)
    crud_pc.submit_transaction(db, alice, _tx(branch, category, "100"))
    crud_pc.submit_transaction(db, bob, _tx(branch, category, "200"))

    assert [t.requested_by_id for t in crud_pc.list_transactions(db, alice)] == [alice.id]
    assert len(crud_pc.list_transactions(db, finance)) == 2
    assert len(crud_pc.list_transactions(db, finance, status=ApprovalStatus.APPROVED)) == 0
