"""Custom exceptions for Trackline."""

POLICY_DENIAL_MESSAGE = (
    "Geolocation is disabled in this environment due to browser/iframe "
    "permissions policy. Real-time tracking is not possible here."
)


class TracklineError(Exception):
    """Base exception for Trackline."""

    pass


class NotAuthorized(TracklineError):
    """No operator is signed in."""

    def __init__(self, message: str = "Please log in to start tracking.") -> None:
        super().__init__(message)


class CapabilityUnavailable(TracklineError):
    """No positioning capability is present."""

    def __init__(
        self, message: str = "Geolocation is not supported by this environment."
    ) -> None:
        super().__init__(message)


class PositionError(TracklineError):
    """Raw error reported by a position provider."""

    @property
    def is_policy_denial(self) -> bool:
        """True when the environment disables positioning by policy."""
        return "permissions policy" in str(self).lower()


class PermissionDenied(TracklineError):
    """The initial position request was refused or failed."""

    @classmethod
    def from_position_error(cls, error: PositionError) -> "PermissionDenied":
        if error.is_policy_denial:
            return cls(POLICY_DENIAL_MESSAGE)
        return cls(f"Geolocation error: {error}. Please enable location services.")


class TransientAcquisitionFailure(TracklineError):
    """A single periodic position request failed."""

    @classmethod
    def from_position_error(cls, error: PositionError) -> "TransientAcquisitionFailure":
        if error.is_policy_denial:
            return cls(POLICY_DENIAL_MESSAGE)
        return cls(f"Geolocation error: {error}")


class StoreWriteFailure(TracklineError):
    """Appending a location record failed."""

    pass


class StoreSubscriptionFailure(TracklineError):
    """The ordered history subscription failed."""

    pass


class WindowParseError(TracklineError, ValueError):
    """Invalid date or time-of-day input for a display window."""

    pass
