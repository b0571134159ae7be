"""
Builders that turn one line of an NWS local storm report into a typed report.

Every report kind shares the same column layout:

    Time,<magnitude>,Location,County,State,Lat,Lon,Comments

The magnitude column is hail size, wind speed or F-scale depending on the
kind. Lines are split on every comma and only the first eight columns are
used, so a comment containing commas is cut at its first comma. A trailing
line terminator is not part of the last column.
"""

from typing import Callable, Dict, Optional

from .errors import MalformedRecord, UnknownReportType
from .parsing import normalize_time, parse_location, to_int32, utc_today
from .schemas import HailReport, ReportType, TornadoReport, TypedReport, WindReport

MIN_COLUMNS = 8


def _columns(line: bytes) -> list[str]:
    if line is None:
        raise MalformedRecord("line cannot be empty")
    words = line.decode("utf-8", errors="replace").rstrip("\r\n").split(",")
    if len(words) < MIN_COLUMNS:
        raise MalformedRecord(f"line did not contain at least {MIN_COLUMNS} columns")
    return words


def _common_fields(words: list[str], today: Optional[str]) -> dict:
    distance, direction, landmark = parse_location(words[2])
    return {
        "time": normalize_time(today or utc_today(), words[0]),
        "distance": distance,
        "direction": direction,
        "landmark": landmark,
        "county": words[3],
        "state": words[4],
        "lat": words[5],
        "lon": words[6],
        "remarks": words[7],
    }


def build_hail(line: bytes, today: Optional[str] = None) -> HailReport:
    words = _columns(line)
    return HailReport(size=to_int32(words[1]), **_common_fields(words, today))


def build_wind(line: bytes, today: Optional[str] = None) -> WindReport:
    words = _columns(line)
    return WindReport(speed=to_int32(words[1]), **_common_fields(words, today))


def build_tornado(line: bytes, today: Optional[str] = None) -> TornadoReport:
    words = _columns(line)
    return TornadoReport(f_scale=to_int32(words[1]), **_common_fields(words, today))


BUILDERS: Dict[ReportType, Callable[..., TypedReport]] = {
    ReportType.HAIL: build_hail,
    ReportType.WIND: build_wind,
    ReportType.TORNADO: build_tornado,
}


def build_report(report_type: Optional[ReportType], line: bytes, today: Optional[str] = None) -> TypedReport:
    builder = BUILDERS.get(report_type) if report_type is not None else None
    if builder is None:
        raise UnknownReportType(f"unknown report type {str(report_type or '')!r}")
    return builder(line, today=today)
