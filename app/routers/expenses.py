from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..database import SessionLocal
from ..log import get_logger
from .. import models, schemas
from ..services.finance import get_group, create_transaction, update_transaction, expense_out

router = APIRouter()
log = get_logger(__name__)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_expense(db: Session, group_id: int, expense_id: int) -> models.Transaction:
    tx = db.get(models.Transaction, expense_id)
    if not tx or tx.group_id != group_id:
        raise HTTPException(status_code=404, detail="Expense not found")
    return tx

@router.post("", response_model=schemas.ExpenseOut)
def add_expense(group_id: int, data: schemas.ExpenseIn, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    tx = create_transaction(db, group, data)
    db.commit(); db.refresh(tx)
    log.info("expense_created", group_id=group.id, expense_id=tx.id, amount=tx.amount, total_paid=tx.total_paid, category=tx.category)
    return expense_out(tx)

@router.get("", response_model=List[schemas.ExpenseOut])
def list_expenses(group_id: int, user_id: Optional[int] = None, category: Optional[schemas.ExpenseCategory] = None,
                  start: Optional[datetime] = None, end: Optional[datetime] = None, db: Session = Depends(get_db)):
    get_group(db, group_id)
    q = db.query(models.Transaction).filter_by(group_id=group_id)
    if category:
        q = q.filter(models.Transaction.category == category)
    start, end = schemas.to_naive_utc(start), schemas.to_naive_utc(end)
    if start:
        q = q.filter(models.Transaction.date >= start)
    if end:
        q = q.filter(models.Transaction.date <= end)
    rows = q.order_by(models.Transaction.date.desc()).all()
    if user_id is not None:
        rows = [r for r in rows if user_id in r.participant_ids or any(p.user_id == user_id for p in r.payers)]
    return [expense_out(r) for r in rows]

@router.get("/{expense_id}", response_model=schemas.ExpenseOut)
def read_expense(group_id: int, expense_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    return expense_out(get_expense(db, group_id, expense_id))

@router.put("/{expense_id}", response_model=schemas.ExpenseOut)
def update_expense(group_id: int, expense_id: int, data: schemas.ExpenseIn, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    tx = update_transaction(db, group, get_expense(db, group_id, expense_id), data)
    db.commit(); db.refresh(tx)
    log.info("expense_updated", group_id=group.id, expense_id=tx.id, amount=tx.amount, total_paid=tx.total_paid, category=tx.category)
    return expense_out(tx)

@router.delete("/{expense_id}")
def delete_expense(group_id: int, expense_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    tx = get_expense(db, group_id, expense_id)
    db.delete(tx)
    db.commit()
    log.info("expense_deleted", group_id=group_id, expense_id=expense_id)
    return {"message": "Expense deleted"}
