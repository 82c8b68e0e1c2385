"""Statistics package."""

from subtracker.queries.statistics import StatisticsEngine, month_name

__all__ = ["StatisticsEngine", "month_name"]
