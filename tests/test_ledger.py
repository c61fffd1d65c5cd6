from dataclasses import dataclass

import pytest

from app.services.ledger import (
    Debt, ExpenseRecord, Payer, compute_balances, compute_debts, effective_participants, is_settled, round_cents,
)

@dataclass(frozen=True)
class M:
    id: str
    name: str = ""

A, B, C, D = M("a", "Ana"), M("b", "Bruno"), M("c", "Carla"), M("d", "Davi")

def expense(amount, payers, participants=()):
    return ExpenseRecord(amount=amount, payers=tuple(Payer(m.id, v) for m, v in payers), participant_ids=tuple(p.id for p in participants))

def as_map(balances):
    return {b.member.id: b.amount for b in balances}

def as_tuples(debts):
    return [(d.from_member.id, d.to_member.id, d.amount) for d in debts]

def test_two_members_one_expense():
    txs = [expense(150, [(A, 150)], [A, B])]
    balances = compute_balances(txs, [A, B])
    assert [(b.member, b.amount) for b in balances] == [(A, 75.0), (B, -75.0)]
    assert compute_debts(txs, [A, B]) == [Debt(from_member=B, to_member=A, amount=75.0)]

def test_settled_member_is_excluded():
    txs = [
        expense(90, [(A, 90)], [A, B, C]),
        expense(60, [(B, 60)], [B, C]),
    ]
    assert as_map(compute_balances(txs, [A, B, C])) == {"a": 60.0, "b": 0.0, "c": -60.0}
    assert as_tuples(compute_debts(txs, [A, B, C])) == [("c", "a", 60.0)]

def test_partial_payment_splits_only_what_was_paid():
    txs = [expense(200, [(A, 100)], [A, B])]
    assert as_map(compute_balances(txs, [A, B])) == {"a": 50.0, "b": -50.0}
    assert as_tuples(compute_debts(txs, [A, B])) == [("b", "a", 50.0)]

def test_orphaned_participant_share_disappears():
    # B is not on the roster, yet still takes half of the debit
    txs = [expense(100, [(A, 100)], [A, B])]
    balances = compute_balances(txs, [A])
    assert as_map(balances) == {"a": 50.0}
    assert as_tuples(compute_debts(txs, [A])) == []

def test_orphaned_payer_credit_is_not_emitted():
    txs = [expense(100, [(D, 100)], [A, B])]
    assert as_map(compute_balances(txs, [A, B])) == {"a": -50.0, "b": -50.0}
    # no visible creditor, so no one to pay
    assert compute_debts(txs, [A, B]) == []

def test_zero_members():
    txs = [expense(100, [(A, 100)], [A, B])]
    assert compute_balances(txs, []) == []
    assert compute_debts(txs, []) == []

def test_no_transactions():
    assert as_map(compute_balances([], [A, B, C])) == {"a": 0.0, "b": 0.0, "c": 0.0}
    assert compute_debts([], [A, B, C]) == []

def test_unpaid_expense_is_a_no_op():
    txs = [expense(80, [], [A, B])]
    assert as_map(compute_balances(txs, [A, B])) == {"a": 0.0, "b": 0.0}

def test_empty_participants_fall_back_to_roster():
    rec = expense(90, [(A, 90)])
    assert effective_participants(rec, [A, B, C]) == ["a", "b", "c"]
    assert as_map(compute_balances([rec], [A, B, C])) == {"a": 60.0, "b": -30.0, "c": -30.0}

def test_payer_outside_participants():
    txs = [expense(30, [(A, 30)], [B, C])]
    assert as_map(compute_balances(txs, [A, B, C])) == {"a": 30.0, "b": -15.0, "c": -15.0}

def test_multi_payer_split():
    txs = [expense(100, [(A, 60), (B, 40)], [A, B, C, D])]
    members = [A, B, C, D]
    assert as_map(compute_balances(txs, members)) == {"a": 35.0, "b": 15.0, "c": -25.0, "d": -25.0}
    assert as_tuples(compute_debts(txs, members)) == [("c", "b", 15.0), ("c", "a", 10.0), ("d", "a", 25.0)]

def test_balances_sorted_descending_with_stable_ties():
    txs = [expense(40, [(C, 40)], [C, D])]
    balances = compute_balances(txs, [A, B, C, D])
    assert [b.member.id for b in balances] == ["c", "a", "b", "d"]

def test_thirds_round_to_cents():
    txs = [expense(100, [(A, 100)], [A, B, C])]
    assert as_map(compute_balances(txs, [A, B, C])) == {"a": 66.67, "b": -33.33, "c": -33.33}
    assert as_tuples(compute_debts(txs, [A, B, C])) == [("b", "a", 33.33), ("c", "a", 33.33)]

def test_rounding_happens_once_at_the_end():
    txs = [expense(0.1, [(A, 0.1)], [B]), expense(0.2, [(A, 0.2)], [B])]
    assert as_map(compute_balances(txs, [A, B])) == {"a": 0.3, "b": -0.3}

def test_greedy_matches_smallest_first():
    txs = [
        expense(10, [(A, 10)], [C]),
        expense(10, [(B, 10)], [C]),
        expense(40, [(B, 40)], [D]),
    ]
    members = [A, B, C, D]
    assert as_map(compute_balances(txs, members)) == {"a": 10.0, "b": 50.0, "c": -20.0, "d": -40.0}
    assert as_tuples(compute_debts(txs, members)) == [("c", "a", 10.0), ("c", "b", 10.0), ("d", "b", 40.0)]

def test_sub_cent_balances_are_settled():
    # 0.01 split three ways leaves every balance within a cent of zero
    txs = [expense(0.01, [(A, 0.01)], [A, B, C])]
    balances = compute_balances(txs, [A, B, C])
    assert all(is_settled(b.amount) for b in balances)
    assert compute_debts(txs, [A, B, C]) == []

@pytest.mark.parametrize("value,expected", [(0.125, 0.13), (-0.125, -0.12), (12.344, 12.34), (-4e-9, 0.0), (75, 75.0)])
def test_round_cents_half_up(value, expected):
    assert round_cents(value) == expected

def _scenario():
    members = [A, B, C, D]
    txs = [
        expense(120, [(A, 120)], [A, B, C, D]),
        expense(45.5, [(B, 20), (C, 25)], [A, B, C]),
        expense(300, [(D, 180)], [B, D]),
        expense(17.4, [(C, 17.4)], [A, D]),
    ]
    return txs, members

def test_conservation_properties():
    txs, members = _scenario()
    balances = compute_balances(txs, members)
    assert abs(sum(b.amount for b in balances)) <= 0.01

    debts = compute_debts(txs, members)
    assert debts
    for d in debts:
        assert d.from_member != d.to_member
        assert d.amount > 0
        assert round_cents(d.amount) == d.amount
    for b in balances:
        if is_settled(b.amount):
            assert all(b.member not in (d.from_member, d.to_member) for d in debts)
        elif b.amount < 0:
            assert abs(sum(d.amount for d in debts if d.from_member == b.member) + b.amount) <= 0.01
        else:
            assert abs(sum(d.amount for d in debts if d.to_member == b.member) - b.amount) <= 0.01
    assert len(debts) <= len(members) - 1

def test_repeat_calls_are_identical_and_inputs_untouched():
    txs, members = _scenario()
    txs_copy, members_copy = list(txs), list(members)
    assert compute_balances(txs, members) == compute_balances(txs, members)
    assert compute_debts(txs, members) == compute_debts(txs, members)
    assert txs == txs_copy
    assert members == members_copy
