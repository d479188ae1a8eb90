"""
Aggregate queries shared by the users, complaints and admin dashboards.

Counts are grouped in the database and folded into dicts that always carry
every enum member, so a status with no rows reports 0 instead of vanishing.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Type
import enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

TREND_DAYS = 30


async def count_rows(db: AsyncSession, model, *conditions) -> int:
    stmt = select(func.count()).select_from(model)
    if conditions:
        stmt = stmt.where(*conditions)
    return await db.scalar(stmt) or 0


async def count_by(
    db: AsyncSession,
    column,
    enum_cls: Type[enum.Enum],
    *conditions
) -> Dict[str, int]:
    """Row count per enum value of ``column``"""
    stmt = select(column, func.count()).group_by(column)
    if conditions:
        stmt = stmt.where(*conditions)
    counts = {member.value: 0 for member in enum_cls}
    for value, count in (await db.execute(stmt)).all():
        key = value.value if isinstance(value, enum.Enum) else value
        counts[key] = count
    return counts


async def daily_trend(
    db: AsyncSession,
    created_column,
    days: int = TREND_DAYS,
    group_column: Optional[Any] = None,
    now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """
    Rows created per calendar day over the last ``days`` days, oldest first.

    With ``group_column`` each day is further split by that column's value.
    """
    since = (now or datetime.utcnow()) - timedelta(days=days)
    day = func.date(created_column).label("date")

    columns = [day, func.count().label("count")]
    group_by = [day]
    if group_column is not None:
        columns.insert(1, group_column)
        group_by.append(group_column)

    stmt = (
        select(*columns)
        .where(created_column >= since)
        .group_by(*group_by)
        .order_by(day)
    )

    trend = []
    for row in (await db.execute(stmt)).all():
        item = {"date": str(row[0]), "count": row[-1]}
        if group_column is not None:
            value = row[1]
            item[group_column.key] = value.value if isinstance(value, enum.Enum) else value
        trend.append(item)
    return trend
