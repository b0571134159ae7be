import re
from datetime import datetime, timezone

# 16-point compass abbreviations used in the location column of storm reports
COMPASS_CODES = frozenset({
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
})

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DISTANCE_RE = re.compile(r"\+?[0-9]+")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_HHMM_RE = re.compile(r"[0-9]{4}")


def parse_location(field: str) -> tuple[int, str, str]:
    """
    Split a location phrase into (distance, direction, landmark).

    "1 SSW Bassville Park" -> (1, "SSW", "Bassville Park")
    "SSW Bassville Park"   -> (0, "SSW", "Bassville Park")
    "1 Bassville Park"     -> (1, "", "Bassville Park")
    "Bassville Park"       -> (0, "", "Bassville Park")
    """
    distance: int | None = None
    direction = ""
    landmark = ""

    words = field.split(" ")
    for i, word in enumerate(words):
        if _DISTANCE_RE.fullmatch(word):
            if distance is None:
                distance = int(word)
            continue

        if word.upper() in COMPASS_CODES:
            direction = word.upper()
            continue

        # everything from the first non-prefix token on is the place name
        landmark = " ".join(words[i:])
        break

    return (distance or 0), direction, landmark


def to_int32(value: str) -> int:
    """
    Best-effort base-10 conversion. Anything that doesn't parse, or doesn't fit
    in a signed 32-bit integer, becomes 0.
    """
    if not _INT_RE.fullmatch(value or ""):
        return 0
    n = int(value)
    if n < INT32_MIN or n > INT32_MAX:
        return 0
    return n


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def normalize_time(reference_date: str, hhmm: str) -> int:
    """
    Build a UTC epoch timestamp from a report's HHMM column and the date the
    report is being recorded on (YYYY-MM-DD). Returns 0 when either part is
    unusable.
    """
    if len(hhmm or "") < 4:
        return 0
    if not _HHMM_RE.fullmatch(hhmm[0:4]):
        return 0

    if not _DATE_RE.fullmatch(reference_date or ""):
        return 0
    try:
        datetime.strptime(reference_date, "%Y-%m-%d")
    except ValueError:
        return 0

    stamp = f"{reference_date} {hhmm[0:2]}:{hhmm[2:4]}:00"
    try:
        dt = datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return 0
    return int(dt.replace(tzinfo=timezone.utc).timestamp())
