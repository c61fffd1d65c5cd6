from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..database import SessionLocal
from .. import schemas
from ..services.finance import get_group, group_records
from ..services.ledger import compute_debts

router = APIRouter()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@router.get("", response_model=List[schemas.DebtOut])
def get_debts(group_id: int, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    debts = compute_debts(group_records(db, group_id), group.members)
    return [
        schemas.DebtOut(from_user=schemas.UserOut.model_validate(d.from_member), to_user=schemas.UserOut.model_validate(d.to_member), amount=d.amount)
        for d in debts
    ]
