from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from typing import Annotated, Literal, Optional, List, Tuple, Union
import string

from .parsing import COMPASS_CODES


class ReportType(str, Enum):
    HAIL = "hail"
    WIND = "wind"
    TORNADO = "tornado"

    def __str__(self) -> str:
        return self.value


class LocationDescriptor(BaseModel):
    distance: int = Field(0, ge=0)
    direction: str = ""
    landmark: str = ""

    @field_validator("direction")
    @classmethod
    def direction_must_be_compass_code(cls, v: str) -> str:
        if v and v not in COMPASS_CODES:
            raise ValueError(f"Unknown compass direction {v!r}.")
        return v


class StormReport(LocationDescriptor):
    """Fields shared by every storm report kind. Lat/lon stay as reported."""
    model_config = ConfigDict(frozen=True)

    time: int
    county: str
    state: str
    lat: str
    lon: str
    remarks: str


class HailReport(StormReport):
    type: Literal["hail"] = "hail"
    size: int


class WindReport(StormReport):
    type: Literal["wind"] = "wind"
    speed: int


class TornadoReport(StormReport):
    type: Literal["tornado"] = "tornado"
    f_scale: int


TypedReport = Union[HailReport, WindReport, TornadoReport]

# Decodes any published payload back into the right report model
ReportEnvelope = TypeAdapter(Annotated[TypedReport, Field(discriminator="type")])


class InboundMessage(BaseModel):
    payload: bytes
    headers: List[Tuple[str, bytes]] = Field(default_factory=list)


class OutboundMessage(BaseModel):
    payload: bytes
    headers: List[Tuple[str, bytes]]


class PreviewRequest(BaseModel):
    report_type: ReportType
    line: str = Field(..., min_length=1, max_length=4096)

    @field_validator("line")
    @classmethod
    def line_must_be_printable(cls, v: str) -> str:
        v = v.rstrip("\r\n")
        if any(ch not in string.printable for ch in v):
            raise ValueError("Line contains non-printable characters.")
        return v


class WorkerStatsResponse(BaseModel):
    running: bool
    forwarded: int
    dropped: int
    failed: int
    last_error: Optional[str] = None
