from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import SessionLocal
from .. import schemas
from ..services.finance import get_group, group_records, balance_status, member_totals
from ..services.ledger import compute_balances, round_cents

router = APIRouter()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@router.get("", response_model=List[schemas.BalanceOut])
def get_balances(group_id: int, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    balances = compute_balances(group_records(db, group_id), group.members)
    return [schemas.BalanceOut(user=schemas.UserOut.model_validate(b.member), amount=b.amount, status=balance_status(b.amount)) for b in balances]

@router.get("/summary", response_model=schemas.BalanceSummaryOut)
def get_balance_summary(group_id: int, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    records = group_records(db, group_id)
    totals = member_totals(records, group.members)
    net = {b.member.id: b.amount for b in compute_balances(records, group.members)}
    members = [
        schemas.MemberSummaryOut(user=schemas.UserOut.model_validate(u), net=net[u.id], **totals[u.id])
        for u in group.members
    ]
    total_spent = sum(r.amount for r in records if r.category != "transfer")
    return schemas.BalanceSummaryOut(group_id=group.id, is_personal=group.is_personal, total_spent=round_cents(total_spent), members=members)
