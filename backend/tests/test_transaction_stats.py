import unittest
from datetime import datetime
from decimal import Decimal

from teenbudget.db import models
from teenbudget.services.transactions import compute_stats, month_bounds

INCOME = models.TransactionType.INCOME
EXPENSE = models.TransactionType.EXPENSE


class MonthBoundsTests(unittest.TestCase):
    def test_month_runs_to_last_second_of_last_day(self) -> None:
        start, end = month_bounds(2028, 2)

        self.assertEqual(start, datetime(2028, 2, 1))
        self.assertEqual(end, datetime(2028, 2, 29, 23, 59, 59))


class ComputeStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.now = datetime(2026, 10, 19, 12, 0)

    def test_change_percent_is_zero_without_previous_month(self) -> None:
        rows = [
            (Decimal("50"), INCOME, datetime(2026, 10, 2)),
            (Decimal("20"), EXPENSE, datetime(2026, 10, 5)),
        ]

        stats = compute_stats(rows, self.now)

        self.assertEqual(stats.previous_month_balance, Decimal("0"))
        self.assertEqual(stats.balance_change, Decimal("30"))
        self.assertEqual(stats.balance_change_percent, Decimal("0"))

    def test_month_windows_and_all_time_balance(self) -> None:
        rows = [
            (Decimal("100"), INCOME, datetime(2026, 8, 10)),
            (Decimal("40"), INCOME, datetime(2026, 9, 1)),
            (Decimal("20"), EXPENSE, datetime(2026, 9, 30, 23, 59, 59)),
            (Decimal("60"), INCOME, datetime(2026, 10, 1)),
            (Decimal("15"), EXPENSE, datetime(2026, 10, 18)),
        ]

        stats = compute_stats(rows, self.now)

        self.assertEqual(stats.total_balance, Decimal("165"))
        self.assertEqual(stats.monthly_income, Decimal("60"))
        self.assertEqual(stats.monthly_expenses, Decimal("15"))
        self.assertEqual(stats.current_month_balance, Decimal("45"))
        self.assertEqual(stats.previous_month_balance, Decimal("20"))
        self.assertEqual(stats.balance_change, Decimal("25"))
        self.assertEqual(stats.balance_change_percent, Decimal("125"))

    def test_negative_previous_balance_uses_absolute_value(self) -> None:
        rows = [
            (Decimal("40"), EXPENSE, datetime(2026, 9, 12)),
            (Decimal("10"), INCOME, datetime(2026, 10, 3)),
        ]

        stats = compute_stats(rows, self.now)

        self.assertEqual(stats.previous_month_balance, Decimal("-40"))
        self.assertEqual(stats.balance_change, Decimal("50"))
        self.assertEqual(stats.balance_change_percent, Decimal("125"))

    def test_january_compares_with_december(self) -> None:
        rows = [
            (Decimal("30"), INCOME, datetime(2026, 12, 24)),
            (Decimal("45"), INCOME, datetime(2027, 1, 2)),
        ]

        stats = compute_stats(rows, datetime(2027, 1, 15))

        self.assertEqual(stats.previous_month_balance, Decimal("30"))
        self.assertEqual(stats.balance_change_percent, Decimal("50"))
