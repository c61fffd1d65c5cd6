from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from ..database import SessionLocal
from ..log import get_logger
from .. import models, schemas
from ..services.finance import get_group as load_group, get_user

router = APIRouter()
log = get_logger(__name__)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@router.post("", response_model=schemas.GroupOut)
def create_group(group: schemas.GroupCreate, db: Session = Depends(get_db)):
    g = models.Group(name=group.name, icon=group.icon)
    for uid in dict.fromkeys(group.member_ids):
        get_user(db, uid)
        g.memberships.append(models.GroupMember(user_id=uid))
    db.add(g)
    db.commit()
    db.refresh(g)
    log.info("group_created", group_id=g.id, members=len(g.memberships))
    return g

@router.get("/{group_id}", response_model=schemas.GroupOut)
def get_group(group_id: int, db: Session = Depends(get_db)):
    return load_group(db, group_id)

@router.delete("/{group_id}")
def delete_group(group_id: int, db: Session = Depends(get_db)):
    g = load_group(db, group_id)
    # transactions, goals and memberships go with the group
    db.delete(g)
    db.commit()
    log.info("group_deleted", group_id=group_id)
    return {"message": "Group deleted"}

@router.post("/{group_id}/members")
def add_member(group_id: int, member: schemas.AddMember, db: Session = Depends(get_db)):
    load_group(db, group_id)
    get_user(db, member.user_id)
    if db.query(models.GroupMember).filter_by(group_id=group_id, user_id=member.user_id).first():
        return {"message": "Already a member"}
    db.add(models.GroupMember(group_id=group_id, user_id=member.user_id))
    db.commit()
    log.info("member_added", group_id=group_id, user_id=member.user_id)
    return {"message": "Member added"}

@router.delete("/{group_id}/members/{user_id}")
def remove_member(group_id: int, user_id: int, db: Session = Depends(get_db)):
    load_group(db, group_id)
    m = db.query(models.GroupMember).filter_by(group_id=group_id, user_id=user_id).first()
    if not m:
        raise HTTPException(status_code=404, detail=f"User {user_id} is not a member of group {group_id}")
    db.delete(m)
    db.commit()
    # past expenses keep referencing the user; they drop out of the balance sheet
    log.info("member_removed", group_id=group_id, user_id=user_id)
    return {"message": "Member removed"}
