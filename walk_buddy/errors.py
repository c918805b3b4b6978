# walk_buddy/errors.py


class WalkBuddyError(Exception):
    """Base class for recoverable device and input errors."""


class HardwareUnavailable(WalkBuddyError):
    """The device has no torch (or buzzer) to drive."""


class CapabilityDenied(WalkBuddyError):
    """An outbound message could not be composed or opened."""


class InvalidInput(WalkBuddyError):
    """User input was rejected (empty contact, non-numeric speed)."""
