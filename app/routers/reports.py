from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..database import SessionLocal
from .. import schemas
from ..services.finance import get_group, group_transactions
from ..services.reports import build_report

router = APIRouter()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@router.get("", response_model=schemas.ReportOut)
def get_report(group_id: int, start: Optional[date] = None, end: Optional[date] = None, db: Session = Depends(get_db)):
    get_group(db, group_id)
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="End date must not precede start date.")
    return build_report(group_transactions(db, group_id), start, end)
