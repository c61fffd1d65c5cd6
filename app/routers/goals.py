from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..database import SessionLocal
from ..log import get_logger
from .. import models, schemas
from ..services.finance import get_group, ensure_member, goal_out, crosses_target

router = APIRouter()
log = get_logger(__name__)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_goal(db: Session, group_id: int, goal_id: int) -> models.Goal:
    goal = db.get(models.Goal, goal_id)
    if not goal or goal.group_id != group_id:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal

@router.post("", response_model=schemas.GoalOut)
def create_goal(group_id: int, data: schemas.GoalCreate, db: Session = Depends(get_db)):
    group = get_group(db, group_id)
    goal = models.Goal(group_id=group.id, name=data.name, target_amount=data.target_amount)
    db.add(goal)
    db.commit(); db.refresh(goal)
    log.info("goal_created", group_id=group.id, goal_id=goal.id, target_amount=goal.target_amount)
    return goal_out(goal)

@router.get("", response_model=List[schemas.GoalOut])
def list_goals(group_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    goals = db.query(models.Goal).filter_by(group_id=group_id).order_by(models.Goal.id).all()
    return [goal_out(g) for g in goals]

@router.get("/{goal_id}", response_model=schemas.GoalOut)
def read_goal(group_id: int, goal_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    return goal_out(get_goal(db, group_id, goal_id))

@router.delete("/{goal_id}")
def delete_goal(group_id: int, goal_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    goal = get_goal(db, group_id, goal_id)
    db.delete(goal)
    db.commit()
    log.info("goal_deleted", group_id=group_id, goal_id=goal_id)
    return {"message": "Goal deleted"}

@router.get("/{goal_id}/contributions", response_model=List[schemas.ContributionOut])
def list_contributions(group_id: int, goal_id: int, db: Session = Depends(get_db)):
    get_group(db, group_id)
    return get_goal(db, group_id, goal_id).contributions

@router.post("/{goal_id}/contributions", response_model=schemas.ContributionResult)
def add_contribution(group_id: int, goal_id: int, data: schemas.ContributionIn, db: Session = Depends(get_db)):
    get_group(db, group_id)
    goal = get_goal(db, group_id, goal_id)
    ensure_member(db, group_id, data.user_id)
    before = sum(c.amount for c in goal.contributions)
    c = models.Contribution(goal_id=goal.id, user_id=data.user_id, amount=data.amount)
    if data.date is not None:
        c.date = data.date
    goal.contributions.append(c)
    db.commit(); db.refresh(c); db.refresh(goal)
    reached_now = crosses_target(goal.target_amount, before, before + data.amount)
    log.info("contribution_added", group_id=group_id, goal_id=goal.id, user_id=data.user_id, amount=data.amount)
    if reached_now:
        log.info("goal_reached", group_id=group_id, goal_id=goal.id, name=goal.name)
    return schemas.ContributionResult(contribution=schemas.ContributionOut.model_validate(c), goal=goal_out(goal), reached_now=reached_now)
