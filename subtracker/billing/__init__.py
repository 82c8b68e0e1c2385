"""Billing calculator package."""

from subtracker.billing.calculator import (
    UPCOMING_WINDOW_DAYS,
    advance,
    days_until,
    is_overdue,
    is_upcoming,
    monthly_cost,
    monthly_equivalent,
    yearly_cost,
    yearly_equivalent,
)

__all__ = [
    "UPCOMING_WINDOW_DAYS",
    "advance",
    "days_until",
    "is_overdue",
    "is_upcoming",
    "monthly_cost",
    "monthly_equivalent",
    "yearly_cost",
    "yearly_equivalent",
]
