from typing import Dict, List, Sequence
from sqlalchemy.orm import Session
from fastapi import HTTPException
from .. import models, schemas
from .ledger import ExpenseRecord, Payer, SETTLED_EPSILON, compute_balances, effective_participants, round_cents

TOLERANCE = 1e-9

def get_group(db: Session, group_id: int) -> models.Group:
    g = db.get(models.Group, group_id)
    if not g:
        raise HTTPException(status_code=404, detail="Group not found")
    return g

def get_user(db: Session, user_id: int) -> models.User:
    u = db.get(models.User, user_id)
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    return u

def ensure_member(db: Session, group_id: int, user_id: int):
    if not db.query(models.GroupMember).filter_by(group_id=group_id, user_id=user_id).first():
        raise HTTPException(status_code=404, detail=f"User {user_id} is not a member of group {group_id}")

def to_record(tx: models.Transaction) -> ExpenseRecord:
    return ExpenseRecord(
        amount=tx.amount,
        payers=tuple(Payer(member_id=p.user_id, amount_paid=p.amount) for p in tx.payers),
        participant_ids=tuple(tx.participant_ids),
        id=tx.id,
        group_id=tx.group_id,
        date=tx.date,
        category=tx.category,
    )

def group_transactions(db: Session, group_id: int) -> List[models.Transaction]:
    return db.query(models.Transaction).filter_by(group_id=group_id).order_by(models.Transaction.date.desc()).all()

def group_records(db: Session, group_id: int) -> List[ExpenseRecord]:
    return [to_record(tx) for tx in group_transactions(db, group_id)]

def validate_expense(amount: float, payers: Sequence[schemas.PayerIn], participant_ids: Sequence[int], member_ids: Sequence[int]):
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be positive.")
    seen = set()
    for p in payers:
        if p.amount <= 0:
            raise HTTPException(status_code=400, detail=f"Payer {p.user_id} must pay a positive amount.")
        if p.user_id in seen:
            raise HTTPException(status_code=400, detail=f"Payer {p.user_id} is listed more than once.")
        seen.add(p.user_id)
    paid = sum(p.amount for p in payers)
    if paid - amount > TOLERANCE:
        raise HTTPException(status_code=400, detail=f"Payers sum ({paid}) exceeds total ({amount}).")
    members = set(member_ids)
    for uid in list(seen) + list(participant_ids):
        if uid not in members:
            raise HTTPException(status_code=404, detail=f"User {uid} is not a member of this group")
    if len(set(participant_ids)) != len(participant_ids):
        raise HTTPException(status_code=400, detail="Participants must be unique.")

def _apply_expense(tx: models.Transaction, group: models.Group, data: schemas.ExpenseIn):
    validate_expense(data.amount, data.payers, data.participant_ids, [m.id for m in group.members])
    tx.description = data.description
    tx.amount = data.amount
    tx.category = data.category
    tx.receipt_url = data.receipt_url
    if data.date is not None:
        tx.date = data.date
    # delete-orphan drops the previous payer and participant rows
    tx.payers = [models.TransactionPayer(user_id=p.user_id, amount=p.amount) for p in data.payers]
    tx.participants = [models.TransactionParticipant(user_id=uid) for uid in data.participant_ids]

def create_transaction(db: Session, group: models.Group, data: schemas.ExpenseIn) -> models.Transaction:
    tx = models.Transaction(group_id=group.id)
    _apply_expense(tx, group, data)
    db.add(tx)
    db.flush()
    return tx

def update_transaction(db: Session, group: models.Group, tx: models.Transaction, data: schemas.ExpenseIn) -> models.Transaction:
    _apply_expense(tx, group, data)
    db.flush()
    return tx

def expense_out(tx: models.Transaction) -> schemas.ExpenseOut:
    paid = tx.total_paid
    return schemas.ExpenseOut(
        id=tx.id, group_id=tx.group_id, description=tx.description, amount=tx.amount, category=tx.category,
        date=tx.date, payers=[schemas.PayerOut.model_validate(p) for p in tx.payers], participant_ids=tx.participant_ids,
        receipt_url=tx.receipt_url, total_paid=round_cents(paid), outstanding=round_cents(max(tx.amount - paid, 0.0)),
    )

def balance_status(amount: float) -> str:
    if amount > SETTLED_EPSILON:
        return "creditor"
    if amount < -SETTLED_EPSILON:
        return "debtor"
    return "settled"

def member_totals(records: Sequence[ExpenseRecord], members: Sequence[models.User]) -> Dict[int, Dict[str, float]]:
    paid_total: Dict[int, float] = {m.id: 0.0 for m in members}
    share_total: Dict[int, float] = {m.id: 0.0 for m in members}
    for r in records:
        for p in r.payers:
            if p.member_id in paid_total:
                paid_total[p.member_id] += p.amount_paid
        participants = effective_participants(r, members)
        if participants and r.total_paid > 0:
            share = r.total_paid / len(participants)
            for uid in participants:
                if uid in share_total:
                    share_total[uid] += share
    return {uid: {"paid_total": round_cents(paid_total[uid]), "share_total": round_cents(share_total[uid])} for uid in paid_total}

def record_settlement(db: Session, group: models.Group, data: schemas.SettlementIn) -> models.Transaction:
    ensure_member(db, group.id, data.debtor_id)
    ensure_member(db, group.id, data.creditor_id)
    if data.debtor_id == data.creditor_id:
        raise HTTPException(status_code=400, detail="Cannot settle with self.")
    if data.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be positive.")
    bals = {b.member.id: b.amount for b in compute_balances(group_records(db, group.id), group.members)}
    deb_amt = bals.get(data.debtor_id, 0.0)
    cred_amt = bals.get(data.creditor_id, 0.0)
    if deb_amt >= -SETTLED_EPSILON:
        raise HTTPException(status_code=400, detail="Debtor does not owe.")
    if cred_amt <= SETTLED_EPSILON:
        raise HTTPException(status_code=400, detail="Creditor is not owed.")
    max_pay = min(-deb_amt, cred_amt)
    if data.amount - max_pay > TOLERANCE:
        raise HTTPException(status_code=400, detail=f"Cannot settle more than outstanding ({max_pay}).")

    creditor = db.get(models.User, data.creditor_id)
    tx = models.Transaction(
        group_id=group.id, description=f"Payment to {creditor.name}", amount=data.amount,
        category="transfer", receipt_url=data.receipt_url,
    )
    # the debtor pays, the creditor alone consumes it
    tx.payers = [models.TransactionPayer(user_id=data.debtor_id, amount=data.amount)]
    tx.participants = [models.TransactionParticipant(user_id=data.creditor_id)]
    db.add(tx)
    db.flush()
    return tx

def goal_out(goal: models.Goal) -> schemas.GoalOut:
    total = sum(c.amount for c in goal.contributions)
    return schemas.GoalOut(
        id=goal.id, group_id=goal.group_id, name=goal.name, target_amount=goal.target_amount,
        total_contributed=round_cents(total),
        remaining=round_cents(max(goal.target_amount - total, 0.0)),
        percent=round_cents(min(total / goal.target_amount * 100, 100.0)) if goal.target_amount > 0 else 0.0,
        reached=total >= goal.target_amount,
    )

def crosses_target(target: float, before: float, after: float) -> bool:
    return before < target <= after
