"""Error taxonomy for patient tracking.

All of these are recoverable at the interaction boundary; none is fatal to a
running session.
"""


class TrackerError(Exception):
    """Base class for expected patient-tracker failures."""


class ValidationError(TrackerError):
    """A required field is missing or has an unusable value."""

    def __init__(self, fields: list[str], message: str = "Please complete the form") -> None:
        self.fields = fields
        super().__init__(f"{message}: {', '.join(fields)}" if fields else message)


class NotFoundError(TrackerError):
    """No record (or reference condition) matches the given key."""

    def __init__(self, key: str, kind: str = "patient") -> None:
        self.key = key
        self.kind = kind
        super().__init__(f"{kind} not found: {key!r}")


class LoadError(TrackerError):
    """The reference dataset could not be fetched or parsed."""


class EmptyStoreError(TrackerError):
    """An export was requested while the store holds no records."""

    def __init__(self) -> None:
        super().__init__("No data")
