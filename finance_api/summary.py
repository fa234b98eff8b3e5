# finance_api/summary.py
"""
Totals, monthly and per-category reports over one user's transactions.

Everything here works on already-loaded Transaction objects and never touches
the database, so the same functions back the API endpoints and the tests.
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal

from .models import TransactionKind

ZERO = Decimal("0.00")


def _split_by_kind(transactions):
    income = ZERO
    expenses = ZERO
    for tx in transactions:
        if tx.type is TransactionKind.INCOME:
            income += tx.amount
        elif tx.type is TransactionKind.EXPENSE:
            expenses += tx.amount
    return income, expenses


def month_label(year, month):
    """'June 2025' style label for a (year, month) pair."""
    return date(year, month, 1).strftime("%B %Y")


def totals_summary(transactions):
    """Income and expense totals; net balance is derived, never stored."""
    income, expenses = _split_by_kind(transactions)
    return {
        "totalIncome": income,
        "totalExpenses": expenses,
        "netBalance": income - expenses,
    }


def monthly_summary(transactions):
    """
    One entry per (year, month) that has at least one transaction, newest
    month first. Empty months are not filled in.
    """
    buckets = defaultdict(list)
    for tx in transactions:
        buckets[(tx.date.year, tx.date.month)].append(tx)

    results = []
    for (year, month) in sorted(buckets, reverse=True):
        income, expenses = _split_by_kind(buckets[(year, month)])
        results.append({
            "month": month_label(year, month),
            "totalIncome": income,
            "totalExpenses": expenses,
            "netBalance": income - expenses,
        })
    return results


def category_spending(transactions):
    """Expense totals per category name, largest first."""
    totals = defaultdict(lambda: ZERO)
    for tx in transactions:
        if tx.type is not TransactionKind.EXPENSE or not tx.category_name:
            continue
        totals[tx.category_name] += tx.amount

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [{"categoryName": name, "totalSpent": total} for name, total in ranked]
