"""
Statistics Engine

Read-only aggregation over the EntityStore, using the billing
calculator for cost normalization. Only active subscriptions are
counted in any figure.

Behaviour kept on purpose:
- average_monthly_cost() returns the total monthly cost (it does not
  divide by the number of subscriptions).
- costs_by_month() sums the raw per-cycle cost, not the normalized
  monthly cost, bucketed by the month of the next payment.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from subtracker.billing import calculator
from subtracker.config import AppSettings, get_settings
from subtracker.models.reminder import CategoryCost, MonthlySpending
from subtracker.models.subscription import Subscription
from subtracker.store import EntityStore


ZERO = Decimal("0")


def month_name(month: int) -> str:
    """English month name for 1..12."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    return calendar.month_name[month]


class StatisticsEngine:
    """
    Spending statistics for the subscriptions in a store.

    GUARANTEES:
    - Never mutates the store
    - Dangling category references count as uncategorized
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Optional[AppSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._settings = settings or get_settings().app
        self._today = today

    def today(self) -> date:
        return self._today()

    def active_subscriptions(self) -> list[Subscription]:
        return [s for s in self._store.list_subscriptions() if s.is_active]

    def subscription_count(self) -> int:
        return len(self._store.list_subscriptions())

    def active_count(self) -> int:
        return len(self.active_subscriptions())

    # =========================================================================
    # TOTALS
    # =========================================================================

    def total_monthly_cost(self) -> Decimal:
        return sum(
            (calculator.monthly_cost(s) for s in self.active_subscriptions()),
            ZERO,
        )

    def total_yearly_cost(self) -> Decimal:
        return sum(
            (calculator.yearly_cost(s) for s in self.active_subscriptions()),
            ZERO,
        )

    def average_monthly_cost(self) -> Decimal:
        """
        Zero without active subscriptions, otherwise the total monthly
        cost. This is not divided by the count.
        """
        if not self.active_subscriptions():
            return ZERO
        return self.total_monthly_cost()

    # =========================================================================
    # BREAKDOWNS
    # =========================================================================

    def costs_by_month(self) -> dict[int, Decimal]:
        """
        Raw cost of active subscriptions grouped by the month of their
        next payment. Only months with at least one payment appear;
        keys are in ascending order.
        """
        totals: dict[int, Decimal] = {}
        for subscription in self.active_subscriptions():
            month = subscription.next_payment_date.month
            totals[month] = totals.get(month, ZERO) + subscription.cost
        return dict(sorted(totals.items()))

    def peak_spending_month(self) -> Optional[MonthlySpending]:
        """The month with the highest raw cost; ties go to the earliest month."""
        by_month = self.costs_by_month()
        if not by_month:
            return None
        month, amount = max(by_month.items(), key=lambda item: (item[1], -item[0]))
        return MonthlySpending(month=month, amount=amount)

    def costs_by_category(self) -> list[CategoryCost]:
        """
        Monthly cost per category, highest first.

        Subscriptions without a category, or whose category no longer
        exists, share one uncategorized bucket. Equal costs keep the
        order in which the buckets were first seen.
        """
        buckets: dict[Optional[UUID], Decimal] = {}
        categories = {}
        for subscription in self.active_subscriptions():
            category = self._store.resolve_category(subscription)
            key = category.id if category else None
            if category:
                categories[key] = category
            buckets[key] = buckets.get(key, ZERO) + calculator.monthly_cost(subscription)

        total = sum(buckets.values(), ZERO)
        rows = [
            CategoryCost(
                category_id=key,
                category=categories.get(key),
                cost=cost,
                share=float(cost / total) if total else 0.0,
            )
            for key, cost in buckets.items()
        ]
        return sorted(rows, key=lambda row: row.cost, reverse=True)

    # =========================================================================
    # DATES
    # =========================================================================

    def is_upcoming(self, subscription: Subscription, today: Optional[date] = None) -> bool:
        return calculator.is_upcoming(
            subscription,
            today or self.today(),
            self._settings.upcoming_window_days,
        )

    def upcoming_payments(
        self,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[Subscription]:
        """Active subscriptions due between today and today + days, inclusive, soonest first."""
        if days is None:
            days = self._settings.upcoming_payments_days
        today = today or self.today()
        end = today + timedelta(days=days)
        due = [
            s for s in self.active_subscriptions()
            if today <= s.next_payment_date <= end
        ]
        return sorted(due, key=lambda s: s.next_payment_date)
