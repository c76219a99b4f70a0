"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Union


def month_start(day: Union[date, datetime], months_back: int = 0) -> date:
    """First day of the month containing `day`, shifted back `months_back` months"""
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length"""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = index // 12, index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def days_since(day: date, now: datetime) -> float:
    """Fractional days from midnight of `day` to `now`"""
    return (now - datetime.combine(day, time(), tzinfo=now.tzinfo)).total_seconds() / 86400


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def expires_in(now: datetime, days: int) -> datetime:
    return now + timedelta(days=days)
