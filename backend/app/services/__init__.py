from app.services.statistics import count_by, count_rows, daily_trend

__all__ = [
    "count_by",
    "count_rows",
    "daily_trend",
]
