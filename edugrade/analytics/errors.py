"""Errors raised by the analytics engine."""


class MalformedRecordError(ValueError):
    """A graded submission that cannot take part in score statistics."""

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Malformed grade on submission {record_id}: {reason}")
