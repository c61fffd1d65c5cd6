"""Balance and debt-settlement engine.

Two pure functions turn a list of expense records and a group roster into
per-member net balances and a list of pairwise debts that settle them.
Nothing is cached: callers recompute on every read.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Hashable, Iterable, List, Optional, Protocol, Sequence, Tuple

SETTLED_EPSILON = 0.01


class Member(Protocol):
    id: Hashable


@dataclass(frozen=True)
class Payer:
    member_id: Hashable
    amount_paid: float


@dataclass(frozen=True)
class ExpenseRecord:
    amount: float
    payers: Tuple[Payer, ...] = ()
    participant_ids: Tuple[Hashable, ...] = ()
    id: Optional[Hashable] = None
    group_id: Optional[Hashable] = None
    date: Optional[datetime] = None
    category: Optional[str] = None

    @property
    def total_paid(self) -> float:
        return sum(p.amount_paid for p in self.payers)


@dataclass(frozen=True)
class Balance:
    member: Any
    amount: float


@dataclass(frozen=True)
class Debt:
    from_member: Any
    to_member: Any
    amount: float


@dataclass
class _Position:
    member: Any
    remaining: float = 0.0


def round_cents(value: float) -> float:
    # half-up, so 0.125 -> 0.13 and -0.125 -> -0.12
    return math.floor(value * 100 + 0.5) / 100


def is_settled(amount: float) -> bool:
    return -SETTLED_EPSILON <= amount <= SETTLED_EPSILON


def effective_participants(record: ExpenseRecord, members: Sequence[Member]) -> List[Hashable]:
    """Participants of ``record``, or the whole roster when it lists none."""
    if record.participant_ids:
        return list(record.participant_ids)
    return [m.id for m in members]


def compute_balances(transactions: Iterable[ExpenseRecord], members: Sequence[Member]) -> List[Balance]:
    """Net signed balance per member, largest creditor first.

    IDs outside ``members`` move the running totals but get no output row.
    """
    if not members:
        return []

    running: Dict[Hashable, float] = {m.id: 0.0 for m in members}

    for tx in transactions:
        total_paid = tx.total_paid

        for payer in tx.payers:
            running[payer.member_id] = running.get(payer.member_id, 0.0) + payer.amount_paid

        participants = effective_participants(tx, members)
        if participants and total_paid > 0:
            share = total_paid / len(participants)
            for pid in participants:
                running[pid] = running.get(pid, 0.0) - share

    balances: List[Balance] = []
    seen = set()
    for member in members:
        if member.id in seen:
            continue
        seen.add(member.id)
        balances.append(Balance(member=member, amount=round_cents(running[member.id])))

    # sorted() is stable: equal amounts keep roster order
    return sorted(balances, key=lambda b: b.amount, reverse=True)


def compute_debts(transactions: Iterable[ExpenseRecord], members: Sequence[Member]) -> List[Debt]:
    """Greedy smallest-first settlement of :func:`compute_balances`."""
    balances = compute_balances(transactions, members)

    debtors = [_Position(b.member, -b.amount) for b in balances if b.amount < -SETTLED_EPSILON]
    creditors = [_Position(b.member, b.amount) for b in balances if b.amount > SETTLED_EPSILON]
    debtors.sort(key=lambda p: p.remaining)
    creditors.sort(key=lambda p: p.remaining)

    debts: List[Debt] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        amount = round_cents(min(debtor.remaining, creditor.remaining))
        if amount > 0:
            debts.append(Debt(from_member=debtor.member, to_member=creditor.member, amount=amount))
        debtor.remaining -= amount
        creditor.remaining -= amount
        if debtor.remaining < SETTLED_EPSILON:
            i += 1
        if creditor.remaining < SETTLED_EPSILON:
            j += 1
    return debts
