# Shop FinSight - Financial tracker & reporting for personal-services businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Sample data generator.

Produces plausible barbershop transactions and expenses spread over the last
90 days, for demos and manual testing. Pass a seeded ``random.Random`` to get
reproducible dates, services and amounts (ids are always fresh).
"""

import random
from datetime import date, timedelta
from typing import Optional

from .db import new_record_id
from .periods import _today
from .records import EXPENSE_TYPES, Expense, Transaction

SERVICES = (
    "Fade",
    "Line-up",
    "Buzz Cut",
    "Scissor Cut",
    "Beard Trim",
    "Shave",
    "Hair Wash",
)
PRICES = (15, 20, 25, 30, 35, 40, 45)

EXPENSE_DESCRIPTIONS = (
    "Rent",
    "Utilities",
    "Equipment",
    "Supplies",
    "Marketing",
    "Insurance",
    "Cleaning supplies",
    "Hair products",
    "Tools maintenance",
    "License renewal",
)
EXPENSE_AMOUNTS = (50, 75, 100, 150, 200, 300, 500, 750, 1000)

SEED_WINDOW_DAYS = 90


def _random_day(rng: random.Random, today: date) -> str:
    return (today - timedelta(days=rng.randrange(SEED_WINDOW_DAYS))).isoformat()


def generate_transactions(
    count: int = 50,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> list[Transaction]:
    """Return ``count`` random transactions, most recent first."""
    if today is None:
        today = _today()
    if rng is None:
        rng = random.Random()

    transactions = [
        Transaction(
            id=new_record_id("txn"),
            date=_random_day(rng, today),
            style=rng.choice(SERVICES),
            price=float(rng.choice(PRICES)),
            notes="Regular customer" if rng.random() > 0.7 else None,
        )
        for _ in range(count)
    ]
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def generate_expenses(
    count: int = 20,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> list[Expense]:
    """Return ``count`` random expenses, most recent first."""
    if today is None:
        today = _today()
    if rng is None:
        rng = random.Random()

    expenses = [
        Expense(
            id=new_record_id("exp"),
            date=_random_day(rng, today),
            type=rng.choice(EXPENSE_TYPES),
            description=rng.choice(EXPENSE_DESCRIPTIONS),
            amount=float(rng.choice(EXPENSE_AMOUNTS)),
        )
        for _ in range(count)
    ]
    return sorted(expenses, key=lambda e: e.date, reverse=True)
