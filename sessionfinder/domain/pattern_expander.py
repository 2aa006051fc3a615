"""
Projection of recurring weekly patterns onto concrete campaign dates.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Range, WeeklyPattern
from .range_algebra import merge
from .time_primitives import date_range, validate_tick_time, weekday_index

logger = logging.getLogger(__name__)

DailyWindow = Tuple[str, str]


def clip_to_daily_window(
    start: str,
    end: str,
    daily_window: Optional[DailyWindow],
) -> Tuple[str, str]:
    """
    Clip a time span to the campaign's daily window.

    A window whose start equals its end covers the whole day and never
    clips. The returned span may be empty (start >= end) when the pattern
    lies completely outside the window.
    """
    if daily_window is None:
        return start, end

    earliest, latest = daily_window
    if earliest == latest:
        return start, end

    return max(start, earliest), min(end, latest)


def expand(
    patterns: Iterable[WeeklyPattern],
    date_from: str,
    date_to: str,
    daily_window: Optional[DailyWindow] = None,
) -> List[Range]:
    """
    Expand weekly patterns into dated ranges for ``[date_from, date_to]``.

    Args:
        patterns: Weekly patterns to project, regardless of polarity
        date_from: First date (inclusive)
        date_to: Last date (inclusive)
        daily_window: Optional ``(earliest, latest)`` clip applied every day

    Returns:
        Merged ranges, ordered by date then start time

    Raises:
        InvalidAvailabilityError: If the dates or window are malformed
    """
    if daily_window is not None:
        validate_tick_time(daily_window[0])
        validate_tick_time(daily_window[1], allow_end_of_day=True)

    by_weekday: Dict[int, List[WeeklyPattern]] = {}
    for pattern in patterns:
        by_weekday.setdefault(pattern.day_of_week, []).append(pattern)

    expanded: List[Range] = []

    for date in date_range(date_from, date_to):
        for pattern in by_weekday.get(weekday_index(date), []):
            start, end = clip_to_daily_window(pattern.start, pattern.end, daily_window)

            # Pattern lies entirely outside the window on this date
            if start >= end:
                continue

            expanded.append(Range(date=date, start=start, end=end))

    logger.debug(
        "Expanded %d weekly pattern(s) into %d range(s) for %s..%s",
        sum(len(day) for day in by_weekday.values()),
        len(expanded),
        date_from,
        date_to,
    )

    return merge(expanded)
