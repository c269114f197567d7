"""
Exceptions raised by the chorus reporter.
"""


class ChorusError(Exception):
    """Base exception for all chorus errors."""
    pass


class ConfigurationError(ChorusError):
    """Raised when a reporter configuration cannot be used."""
    pass


class ReporterStateError(ChorusError):
    """Raised when the event stream breaks the reporter's bookkeeping."""
    pass


class OverlappingTestError(ReporterStateError):
    """Raised when a spec starts while another test is still running."""
    pass


class NoActiveTestError(ReporterStateError):
    """Raised when a test is required but none is running."""
    pass


class NoActiveGroupError(ReporterStateError):
    """Raised when a group is required but none is open."""
    pass


class GroupClosedError(ReporterStateError):
    """Raised when something is added to a group that already ended."""
    pass


class ItemFinalizedError(ReporterStateError):
    """Raised when a finished test or group is ended a second time."""
    pass
