from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence
from .. import models, schemas
from .ledger import round_cents

def in_range(txs: Sequence[models.Transaction], start: Optional[date], end: Optional[date]) -> List[models.Transaction]:
    lo = datetime.combine(start, time.min) if start else None
    hi = datetime.combine(end, time(23, 59, 59)) if end else None
    out = []
    for tx in txs:
        if lo and tx.date < lo:
            continue
        if hi and tx.date > hi:
            continue
        out.append(tx)
    return out

def previous_period(start: date, end: date):
    """Window of the same length ending the day before ``start``."""
    days = abs((end - start).days) + 1
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - timedelta(days=days - 1)
    return prev_start, prev_end

def build_report(txs: Sequence[models.Transaction], start: Optional[date] = None, end: Optional[date] = None) -> schemas.ReportOut:
    current = in_range(txs, start, end)
    total = sum(tx.amount for tx in current)

    trend = 0.0
    if start:
        prev_start, prev_end = previous_period(start, end or date.today())
        prev_total = sum(tx.amount for tx in in_range(txs, prev_start, prev_end))
        if prev_total > 0:
            trend = (total - prev_total) / prev_total * 100

    by_category: Dict[str, float] = {}
    by_member: Dict[int, float] = {}
    for tx in current:
        by_category[tx.category] = by_category.get(tx.category, 0.0) + tx.amount
        for p in tx.payers:
            by_member[p.user_id] = by_member.get(p.user_id, 0.0) + p.amount

    categories = [
        schemas.CategoryTotal(category=c, amount=round_cents(a), percentage=round_cents(a / total * 100) if total > 0 else 0.0)
        for c, a in sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
    ]
    members = [
        schemas.MemberTotal(user_id=uid, amount=round_cents(a))
        for uid, a in sorted(by_member.items(), key=lambda kv: kv[1], reverse=True)
    ]
    return schemas.ReportOut(
        total=round_cents(total),
        count=len(current),
        average=round_cents(total / len(current)) if current else 0.0,
        trend_percent=round_cents(trend),
        by_category=categories,
        by_member=members,
    )
