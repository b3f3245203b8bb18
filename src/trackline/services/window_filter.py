"""Filtering the history by calendar day and time-of-day window."""

from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, List, Optional

from trackline.core.logger import log_call, log_result
from trackline.models.location import LocationRecord
from trackline.models.window import TimeWindow


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Converts a timestamp to local time (system zone when tz is None)."""
    if tz is None:
        return moment.astimezone()
    return moment.astimezone(tz)


def local_today(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> date:
    """Today's date in the zone the history is filtered in."""
    return to_local(now or datetime.now(timezone.utc), tz).date()


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


class WindowFilter:
    """Selects the records of one day that fall inside a time-of-day window.

    With start <= end the window is a same-day range. With start > end it
    wraps around midnight, but the day check still pins every match to the
    selected date: a 22:00-02:00 window on June 1st matches June 1st 23:00
    and June 1st 01:00, never June 2nd 01:00. Both bounds are inclusive.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        """
        Args:
            tz: Zone used for the local interpretation of timestamps
        """
        self.tz = tz

    def matches(self, record: LocationRecord, window: TimeWindow) -> bool:
        local = to_local(record.timestamp, self.tz)
        if local.date() != window.date:
            return False

        point = minute_of_day(local)
        start = window.start.minutes
        end = window.end.minutes

        if start <= end:
            return start <= point <= end
        return point >= start or point <= end

    def filter(self, history: Iterable[LocationRecord], window: TimeWindow) -> List[LocationRecord]:
        """Returns matching records in their original order."""
        log_call("WindowFilter", "filter", window=str(window))
        result = [record for record in history if self.matches(record, window)]
        log_result("WindowFilter", "filter", f"{len(result)} points")
        return result
