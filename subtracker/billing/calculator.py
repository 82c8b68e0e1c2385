"""
Billing Calculator

Pure, stateless functions that normalize a subscription's cost across
billing cycles and answer date questions about its next payment.

Costs are Decimal. Cycle multipliers are exact fractions, so
cost * numerator / denominator keeps monthly and annual subscriptions
exact (120.00 annually is exactly 10.00 monthly).
"""

from datetime import date, timedelta
from decimal import Decimal
from fractions import Fraction

from subtracker.models.subscription import BillingCycle, Subscription


UPCOMING_WINDOW_DAYS = 7


def monthly_equivalent(cycle: BillingCycle) -> Fraction:
    return cycle.monthly_equivalent


def yearly_equivalent(cycle: BillingCycle) -> Fraction:
    """Number of charges per year (weekly -> 52, quarterly -> 4)."""
    return cycle.monthly_equivalent * 12


def monthly_cost(subscription: Subscription) -> Decimal:
    """Cost normalized to one month."""
    factor = subscription.billing_cycle.monthly_equivalent
    return subscription.cost * factor.numerator / factor.denominator


def yearly_cost(subscription: Subscription) -> Decimal:
    return monthly_cost(subscription) * 12


def days_until(subscription: Subscription, today: date) -> int:
    """Whole calendar days from today to the next payment (negative if overdue)."""
    return (subscription.next_payment_date - today).days


def is_upcoming(
    subscription: Subscription,
    today: date,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> bool:
    """True when the next payment is 0 to window_days days away, inclusive."""
    return 0 <= days_until(subscription, today) <= window_days


def is_overdue(subscription: Subscription, today: date) -> bool:
    return days_until(subscription, today) < 0


def advance(subscription: Subscription) -> date:
    """
    The payment date one cycle after the current next payment date.

    This is a single fixed-length hop; a long-overdue subscription is
    not caught up to the present.
    """
    return subscription.next_payment_date + timedelta(days=subscription.billing_cycle.days)
