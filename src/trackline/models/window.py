"""Model for the day and time-of-day display window."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from trackline.core.exceptions import WindowParseError


@dataclass(frozen=True)
class TimeOfDay:
    """Hour and minute of a day."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise WindowParseError(f"Invalid time of day: {self.hour:02d}:{self.minute:02d}")

    @property
    def minutes(self) -> int:
        """Minutes since midnight."""
        return self.hour * 60 + self.minute

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """Parses "HH:MM" (seconds, if present, are ignored).

        Raises:
            WindowParseError: If the text is not a valid time of day
        """
        parts = text.strip().split(":") if text else []
        if len(parts) not in (2, 3):
            raise WindowParseError(f"Invalid time of day: {text!r}. Expected HH:MM")
        try:
            hour, minute = int(parts[0]), int(parts[1])
        except ValueError:
            raise WindowParseError(f"Invalid time of day: {text!r}. Expected HH:MM")
        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


DEFAULT_START = TimeOfDay(19, 0)
DEFAULT_END = TimeOfDay(21, 0)


@dataclass(frozen=True)
class TimeWindow:
    """Calendar day plus a start/end time of day.

    A start later than the end selects an overnight window (e.g. 22:00-02:00).
    """

    date: date
    start: TimeOfDay = DEFAULT_START
    end: TimeOfDay = DEFAULT_END

    @property
    def is_overnight(self) -> bool:
        return self.start.minutes > self.end.minutes

    @classmethod
    def parse(
        cls,
        date_text: Optional[str] = None,
        start_text: Optional[str] = None,
        end_text: Optional[str] = None,
        today: Optional[date] = None,
    ) -> "TimeWindow":
        """Builds a window from user input, falling back to defaults.

        Args:
            date_text: Day in format "YYYY-MM-DD" (default today)
            start_text: Start time "HH:MM" (default 19:00)
            end_text: End time "HH:MM" (default 21:00)
            today: Day used when date_text is missing

        Raises:
            WindowParseError: If any part cannot be parsed
        """
        if date_text:
            try:
                day = date.fromisoformat(date_text.strip())
            except ValueError:
                raise WindowParseError(f"Invalid date: {date_text!r}. Expected YYYY-MM-DD")
        else:
            day = today or date.today()

        return cls(
            date=day,
            start=TimeOfDay.parse(start_text) if start_text else DEFAULT_START,
            end=TimeOfDay.parse(end_text) if end_text else DEFAULT_END,
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "start": str(self.start),
            "end": str(self.end),
            "overnight": self.is_overnight,
        }

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.start}-{self.end}"
