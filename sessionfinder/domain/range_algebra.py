"""
Per-date union and difference over sets of half-open ranges.

Every function here is total: empty input on either side is a no-op, and
no argument is ever mutated.
"""

from collections import defaultdict
from typing import Dict, Iterable, List

from .models import Range
from .time_primitives import parse_time, validate_date, validate_tick_time, validate_time


def _group_by_date(ranges: Iterable[Range]) -> Dict[str, List[Range]]:
    grouped: Dict[str, List[Range]] = defaultdict(list)
    for time_range in ranges:
        grouped[time_range.date].append(time_range)
    return grouped


def merge(ranges: Iterable[Range]) -> List[Range]:
    """
    Merge overlapping or adjacent ranges on the same date.

    Example: [09:00-10:00, 10:00-11:00] -> [09:00-11:00]

    The result is ordered by date, then start time, and does not depend on
    the order of the input.
    """
    merged: List[Range] = []

    for date, day_ranges in sorted(_group_by_date(ranges).items()):
        ordered = sorted(day_ranges, key=Range.sort_key)
        current_start = ordered[0].start
        current_end = ordered[0].end

        for candidate in ordered[1:]:
            if candidate.start <= current_end:
                if candidate.end > current_end:
                    current_end = candidate.end
            else:
                merged.append(Range(date=date, start=current_start, end=current_end))
                current_start = candidate.start
                current_end = candidate.end

        merged.append(Range(date=date, start=current_start, end=current_end))

    return merged


def subtract(base: Iterable[Range], cut: Iterable[Range]) -> List[Range]:
    """
    Carve the ``cut`` ranges out of every ``base`` range on the same date.

    Example:
    Base: 13:00 - 17:00
    Cut: [14:00-15:00]
    Result: [13:00-14:00, 15:00-17:00]
    """
    base_list = list(base)
    cuts_by_date = _group_by_date(cut)
    if not cuts_by_date:
        return base_list

    for day_cuts in cuts_by_date.values():
        day_cuts.sort(key=Range.sort_key)

    remaining: List[Range] = []

    for base_range in base_list:
        day_cuts = cuts_by_date.get(base_range.date)
        if not day_cuts:
            remaining.append(base_range)
            continue

        consumed = base_range.start

        for cut_range in day_cuts:
            # Cut does not touch what is left of this range
            if cut_range.end <= consumed or cut_range.start >= base_range.end:
                continue

            if cut_range.start > consumed:
                remaining.append(
                    Range(date=base_range.date, start=consumed, end=cut_range.start)
                )

            if cut_range.end > consumed:
                consumed = cut_range.end

            if consumed >= base_range.end:
                break

        if consumed < base_range.end:
            remaining.append(Range(date=base_range.date, start=consumed, end=base_range.end))

    return remaining


def intersect(first: Iterable[Range], second: Iterable[Range]) -> List[Range]:
    """
    Return the merged time covered by both range sets.

    Returns an empty list if the two sets share no time.
    """
    second_by_date = _group_by_date(merge(second))
    overlaps: List[Range] = []

    for left in merge(first):
        for right in second_by_date.get(left.date, []):
            start = max(left.start, right.start)
            end = min(left.end, right.end)
            if start < end:
                overlaps.append(Range(date=left.date, start=start, end=end))

    return merge(overlaps)


def total_minutes(ranges: Iterable[Range]) -> int:
    """Minutes covered by ``ranges``, counting shared time once."""
    return sum(parse_time(r.end) - parse_time(r.start) for r in merge(ranges))


def clamp_to_window(ranges: Iterable[Range], earliest: str, latest: str) -> List[Range]:
    """
    Clip every range to a daily ``[earliest, latest)`` window.

    Equal bounds mean a full-day window, so nothing is clipped. Ranges that
    fall entirely outside the window are dropped.
    """
    validate_tick_time(earliest)
    validate_tick_time(latest, allow_end_of_day=True)
    if earliest == latest:
        return merge(ranges)

    clipped: List[Range] = []
    for time_range in ranges:
        start = max(time_range.start, earliest)
        end = min(time_range.end, latest)
        if start < end:
            clipped.append(Range(date=time_range.date, start=start, end=end))

    return merge(clipped)


def contains_time(ranges: Iterable[Range], date: str, time: str) -> bool:
    """Check whether the tick starting at ``time`` on ``date`` is covered."""
    validate_date(date)
    validate_time(time)
    return any(r.date == date and r.start <= time < r.end for r in ranges)
