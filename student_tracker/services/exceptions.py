"""Domain errors raised by the tracking and ranking services.

Routes let these propagate; handlers registered in `student_tracker.main`
map them to HTTP responses.
"""


class TrackerError(Exception):
    """Base class for domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TrackerError):
    """Referenced unit, item or assignment does not exist."""

    status_code = 404


class ValidationError(TrackerError):
    """Malformed input, e.g. a completion against a non-assignment id."""

    status_code = 422


class ConflictError(TrackerError):
    """Duplicate (item, user) record. Absorbed by idempotent writes."""

    status_code = 409


class DataIntegrityError(TrackerError):
    """Stored records contradict an invariant (completion before posting)."""

    status_code = 500
