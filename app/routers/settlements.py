from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import SessionLocal
from ..log import get_logger
from .. import schemas
from ..services.finance import get_group, record_settlement, expense_out

router = APIRouter()
log = get_logger(__name__)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@router.post("", response_model=schemas.ExpenseOut)
def settle(group_id: int, data: schemas.SettlementIn, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    tx = record_settlement(db, group, data)
    db.commit(); db.refresh(tx)
    log.info("settlement_recorded", group_id=group.id, expense_id=tx.id, debtor_id=data.debtor_id, creditor_id=data.creditor_id, amount=data.amount)
    return expense_out(tx)
