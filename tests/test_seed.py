import random
from datetime import date

from shop_finsight.records import validate_expense, validate_transaction
from shop_finsight.seed import SERVICES, generate_expenses, generate_transactions

TODAY = date(2025, 6, 30)


def test_generate_transactions_within_last_90_days_sorted():
    transactions = generate_transactions(50, today=TODAY, rng=random.Random(1))

    assert len(transactions) == 50
    dates = [t.date for t in transactions]
    assert dates == sorted(dates, reverse=True)
    assert min(dates) >= "2025-04-02"
    assert max(dates) <= "2025-06-30"
    assert all(t.style in SERVICES for t in transactions)
    assert all(t.id.startswith("txn_") for t in transactions)
    for t in transactions:
        validate_transaction(t)


def test_generate_expenses_are_valid():
    expenses = generate_expenses(20, today=TODAY, rng=random.Random(1))

    assert len(expenses) == 20
    assert all(e.id.startswith("exp_") for e in expenses)
    for e in expenses:
        validate_expense(e)


def test_seeded_generator_is_reproducible():
    first = generate_transactions(10, today=TODAY, rng=random.Random(42))
    second = generate_transactions(10, today=TODAY, rng=random.Random(42))

    def strip_ids(rows):
        return [(t.date, t.style, t.price, t.notes) for t in rows]

    assert strip_ids(first) == strip_ids(second)
