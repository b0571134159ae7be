import logging
from typing import Optional, Sequence, Tuple

from .broker import TYPE_HEADER, Consumer, Provider
from .errors import BrokerError, ForwardError, MissingTypeHeader, ReceiveError, UnknownReportType
from .reports import build_report
from .schemas import OutboundMessage, ReportType, TypedReport


def resolve_type(headers: Sequence[Tuple[str, bytes]]) -> ReportType:
    """Report type from the first header whose key is reportType, ignoring case."""
    for key, value in headers:
        if key.lower() != TYPE_HEADER.lower():
            continue
        raw = (value or b"").decode("utf-8", errors="replace").strip()
        try:
            return ReportType(raw.lower())
        except ValueError:
            raise UnknownReportType(f"unable to process report due to unknown type {raw!r}") from None
    raise MissingTypeHeader(f"no {TYPE_HEADER} header on message")


def serialize(report: TypedReport) -> bytes:
    return report.model_dump_json().encode("utf-8")


def to_outbound(report_type: ReportType, report: TypedReport) -> OutboundMessage:
    return OutboundMessage(
        payload=serialize(report),
        headers=[(TYPE_HEADER, report_type.value.encode("utf-8"))],
    )


class Transformer:
    """
    Pulls one raw report line off the inbound topic, turns it into a typed
    report and publishes it to the outbound topic with the same type header.
    """

    def __init__(self, consumer: Consumer, provider: Provider, logger: Optional[logging.Logger] = None):
        self.consumer = consumer
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)

    async def get_message(self) -> OutboundMessage:
        try:
            msg = await self.consumer.read_message()
        except BrokerError as e:
            raise ReceiveError(f"failed to get message: {e}") from e
        self.logger.debug("incoming message %r", msg.payload)

        resolve_error: Optional[UnknownReportType] = None
        try:
            report_type: Optional[ReportType] = resolve_type(msg.headers)
        except UnknownReportType as e:
            self.logger.warning("report type not resolved: %s", e)
            report_type = None
            resolve_error = e
        self.logger.debug("report type %s", report_type)

        try:
            report = build_report(report_type, msg.payload)
        except UnknownReportType as e:
            if resolve_error is not None:
                raise resolve_error from e
            raise

        out = to_outbound(report_type, report)
        try:
            await self.provider.write_message(out)
        except BrokerError as e:
            raise ForwardError(f"failed to forward {report_type} report: {e}", report_type=report_type.value) from e
        self.logger.debug("message forwarded type=%s", report_type)
        return out
