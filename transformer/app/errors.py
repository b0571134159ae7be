"""Failure types raised while turning raw report lines into published reports."""

from typing import Optional


class TransformError(Exception):
    """Base class for transformer failures."""

    error_code = "TRANSFORM_ERROR"


class RecordError(TransformError):
    """The inbound record cannot be transformed; it is dropped, never retried."""

    error_code = "RECORD_ERROR"


class MalformedRecord(RecordError):
    error_code = "MALFORMED_RECORD"


class UnknownReportType(RecordError):
    error_code = "UNKNOWN_REPORT_TYPE"


class MissingTypeHeader(UnknownReportType):
    error_code = "MISSING_TYPE_HEADER"


class BrokerError(TransformError):
    """Raised by the broker adapters for transport or API failures."""

    error_code = "BROKER_ERROR"


class ReceiveError(TransformError):
    error_code = "RECEIVE_ERROR"


class ForwardError(TransformError):
    """Publishing a built report failed. Carries the report type for diagnostics."""

    error_code = "FORWARD_ERROR"

    def __init__(self, message: str, report_type: Optional[str] = None):
        super().__init__(message)
        self.report_type = report_type
