class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.details.get("kind", type(self).__name__)


class ScheduleValidationError(AppError):
    """Raised before any store call when a slot, batch or copy request is invalid."""
    def __init__(self, message: str, *, kind: str, status_code: int = 422, **details):
        super().__init__(message, status_code=status_code, details={"kind": kind, **details})


class TimeParseError(ScheduleValidationError):
    """Raised when a loosely formatted time of day cannot be normalized."""
    kind_name = "InvalidFormat"

    def __init__(self, message: str, *, raw: str | None, field: str | None = None):
        super().__init__(message, kind=self.kind_name, raw=raw, field=field)

    def for_field(self, field: str) -> "TimeParseError":
        """Return a copy of this error bound to a form field name."""
        return type(self)(self.message, raw=self.details.get("raw"), field=field)


class InvalidFormat(TimeParseError):
    kind_name = "InvalidFormat"


class InvalidMinutes(TimeParseError):
    kind_name = "InvalidMinutes"


class InvalidHour(TimeParseError):
    kind_name = "InvalidHour"


class InvalidInterval(ScheduleValidationError):
    def __init__(self, start: str, end: str):
        super().__init__(
            "End time must be after start time",
            kind="InvalidInterval",
            start=start,
            end=end,
        )


class SlotConflict(ScheduleValidationError):
    """Raised when a candidate interval overlaps a slot already on the day."""
    def __init__(self, conflicting_slot_id: str | None, period_number: int, start: str, end: str):
        super().__init__(
            f"Time overlaps period #{period_number} ({start[:5]}-{end[:5]})",
            kind="Conflict",
            status_code=409,
            conflicting_slot_id=conflicting_slot_id,
            period_number=period_number,
            start=start,
            end=end,
        )


class MissingRequiredField(ScheduleValidationError):
    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} is required", kind="MissingRequiredField", field=field)


class TopicChapterMismatch(ScheduleValidationError):
    def __init__(self, topic_id: str, chapter_id: str):
        super().__init__(
            "Topic does not belong to the selected chapter",
            kind="TopicChapterMismatch",
            field="syllabus_topic_id",
            topic_id=topic_id,
            chapter_id=chapter_id,
        )


class InvalidBatchSpec(ScheduleValidationError):
    def __init__(self, field: str, message: str):
        super().__init__(message, kind="InvalidBatchSpec", field=field)


class InvalidCopyRange(ScheduleValidationError):
    def __init__(self, message: str):
        super().__init__(message, kind="InvalidCopyRange", field="target_date")


class NoSourceData(AppError):
    """Raised when a copy finds nothing to copy after kind filtering."""
    def __init__(self, source_date: str):
        super().__init__(
            "Nothing to copy from source date",
            status_code=404,
            details={"kind": "NoSourceData", "source_date": source_date},
        )


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)


class SlotNotFound(ResourceNotFoundError):
    def __init__(self, slot_id: str):
        super().__init__("Timetable slot", slot_id)
        self.details = {"kind": "SlotNotFound", "slot_id": slot_id}


class StoreError(AppError):
    """Raised when the schedule store rejects or fails a call. Never retried here."""
    def __init__(self, operation: str, message: str = "Schedule store operation failed"):
        super().__init__(message, status_code=503, details={"kind": "StoreError", "operation": operation})
