from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..database import SessionLocal
from ..log import get_logger
from .. import models, schemas
from ..services.finance import get_user
from ..services.ledger import round_cents

router = APIRouter()
log = get_logger(__name__)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_revenue(db: Session, user_id: int, revenue_id: int) -> models.Revenue:
    r = db.get(models.Revenue, revenue_id)
    if not r or r.user_id != user_id:
        raise HTTPException(status_code=404, detail="Revenue not found")
    return r

@router.post("", response_model=schemas.RevenueOut)
def add_revenue(user_id: int, data: schemas.RevenueIn, db: Session = Depends(get_db)):
    get_user(db, user_id)
    r = models.Revenue(user_id=user_id, **data.model_dump())
    db.add(r)
    db.commit(); db.refresh(r)
    log.info("revenue_added", user_id=user_id, revenue_id=r.id, amount=r.amount, received=r.received)
    return r

@router.get("", response_model=schemas.RevenueSummaryOut)
def list_revenues(user_id: int, db: Session = Depends(get_db)):
    get_user(db, user_id)
    rows = db.query(models.Revenue).filter_by(user_id=user_id).all()
    received = sorted((r for r in rows if r.received), key=lambda r: r.date, reverse=True)
    forecast = sorted((r for r in rows if not r.received), key=lambda r: r.date)
    return schemas.RevenueSummaryOut(
        received=[schemas.RevenueOut.model_validate(r) for r in received],
        forecast=[schemas.RevenueOut.model_validate(r) for r in forecast],
        total_received=round_cents(sum(r.amount for r in received)),
        total_forecast=round_cents(sum(r.amount for r in forecast)),
    )

@router.post("/{revenue_id}/toggle-received", response_model=schemas.RevenueOut)
def toggle_received(user_id: int, revenue_id: int, db: Session = Depends(get_db)):
    get_user(db, user_id)
    r = get_revenue(db, user_id, revenue_id)
    r.received = not r.received
    db.commit(); db.refresh(r)
    log.info("revenue_toggled", user_id=user_id, revenue_id=r.id, received=r.received)
    return r

@router.delete("/{revenue_id}")
def delete_revenue(user_id: int, revenue_id: int, db: Session = Depends(get_db)):
    get_user(db, user_id)
    db.delete(get_revenue(db, user_id, revenue_id))
    db.commit()
    log.info("revenue_deleted", user_id=user_id, revenue_id=revenue_id)
    return {"message": "Revenue deleted"}
