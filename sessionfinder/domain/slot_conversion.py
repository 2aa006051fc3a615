"""
Conversion between range sets and atomic tick sets.

Ranges are the natural form for storage and patterns; ticks make it cheap
to count participants per time unit. A tick is keyed by the date ordinal
and the minute of day, so no string parsing happens during aggregation.
"""

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Tuple

from .models import Range, Tick
from .time_primitives import (
    MAX_TICKS_PER_RANGE,
    advance_one_tick,
    date_from_ordinal,
    date_ordinal,
    format_time,
    parse_time,
)

logger = logging.getLogger(__name__)


def tick_for(date: str, time: str) -> Tick:
    """Build the tick that starts at ``time`` on ``date``."""
    return Tick(day=date_ordinal(date), minute=parse_time(time))


def tick_label(tick: Tick) -> Tuple[str, str]:
    """Return the ``(date, time)`` strings for a tick."""
    return date_from_ordinal(tick.day), format_time(tick.minute)


def ranges_to_ticks(ranges: Iterable[Range]) -> FrozenSet[Tick]:
    """
    Expand ranges into one tick per ``TICK_MINUTES`` from start to end.

    A range with ``start >= end`` contributes nothing. At most
    ``MAX_TICKS_PER_RANGE`` ticks are emitted per range; corrupt input is
    truncated instead of looping forever.
    """
    ticks = set()

    for time_range in ranges:
        if time_range.start >= time_range.end:
            continue

        day = date_ordinal(time_range.date)
        current = time_range.start
        steps = 0

        while current < time_range.end and steps < MAX_TICKS_PER_RANGE:
            ticks.add(Tick(day=day, minute=parse_time(current)))
            current = advance_one_tick(current)
            steps += 1

        if current < time_range.end:
            logger.warning("Truncated range %s after %d ticks", time_range, steps)

    return frozenset(ticks)


def ticks_to_ranges(ticks: Iterable[Tick]) -> List[Range]:
    """
    Fold ticks back into merged ranges.

    A tick extends the running range when it starts where the range ends,
    i.e. one ``advance_one_tick`` after the previous tick; any gap starts a
    new one. Output is
    ordered by date, then start time.
    """
    minutes_by_day: Dict[int, List[int]] = defaultdict(list)
    for tick in set(ticks):
        minutes_by_day[tick.day].append(tick.minute)

    ranges: List[Range] = []

    for day in sorted(minutes_by_day):
        date = date_from_ordinal(day)
        times = [format_time(minute) for minute in sorted(minutes_by_day[day])]

        range_start = times[0]
        range_end = advance_one_tick(range_start)

        for time in times[1:]:
            if time == range_end:
                range_end = advance_one_tick(time)
            else:
                ranges.append(Range(date=date, start=range_start, end=range_end))
                range_start = time
                range_end = advance_one_tick(time)

        ranges.append(Range(date=date, start=range_start, end=range_end))

    return ranges
