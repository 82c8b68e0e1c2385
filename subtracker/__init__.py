"""
Subscription Tracker - Source Package

Tracks recurring subscriptions for a single user: stores them,
normalizes their cost across billing cycles, aggregates spending
statistics, imports/exports CSV and derives payment reminders.

DESIGN PRINCIPLES:
1. Components are constructed explicitly, never global
2. References between entities are weak ids, resolved on demand
3. Bad input degrades to "skip and continue", and is always logged
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Subscription Tracker Team"
