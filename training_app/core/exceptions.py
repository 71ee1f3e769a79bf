class TrainingRecordsError(Exception):
    """Base class for errors raised by the training records core."""


class ValidationError(TrainingRecordsError):
    """A required field is missing or a value is out of range."""


class DuplicateError(TrainingRecordsError):
    """The employee already has a registration for this session."""


class MalformedSnapshotError(TrainingRecordsError):
    """A snapshot blob could not be parsed or lacks the required collections."""
