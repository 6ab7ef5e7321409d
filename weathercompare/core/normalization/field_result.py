"""
Typed field extraction from provider payloads.

Each lookup yields a FieldResult with an explicit status:
- VALID: value present and well-formed
- DEFAULTED: value missing, an acceptable default was substituted
- MALFORMED: value present but unusable; fatal for the payload

Callers can therefore tell a genuine zero from "no data" instead of
silently falling back to 0.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

from ..exceptions import UpstreamSchemaError

T = TypeVar("T")

_MISSING = object()


class FieldStatus(str, Enum):
    VALID = "valid"
    DEFAULTED = "defaulted"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FieldResult(Generic[T]):
    status: FieldStatus
    value: T | None = None
    path: str = ""
    reason: str | None = None

    @classmethod
    def valid(cls, value: T, path: str = "") -> "FieldResult[T]":
        return cls(FieldStatus.VALID, value, path)

    @classmethod
    def defaulted(cls, default: T | None, path: str = "") -> "FieldResult[T]":
        return cls(FieldStatus.DEFAULTED, default, path)

    @classmethod
    def malformed(cls, path: str, reason: str) -> "FieldResult[T]":
        return cls(FieldStatus.MALFORMED, None, path, reason)

    @property
    def is_valid(self) -> bool:
        return self.status is FieldStatus.VALID

    @property
    def is_defaulted(self) -> bool:
        return self.status is FieldStatus.DEFAULTED

    @property
    def is_malformed(self) -> bool:
        return self.status is FieldStatus.MALFORMED

    def unwrap(self, source: str | None = None) -> T | None:
        """Return the value, raising UpstreamSchemaError if malformed."""
        if self.is_malformed:
            raise UpstreamSchemaError(
                f"Malformed field '{self.path}': {self.reason}", source
            )
        return self.value


def dig(payload: Any, path: str) -> Any:
    """
    Walk a dotted path through nested dicts/lists.

    Integer segments index into lists. Returns a private sentinel when
    any segment is absent.
    """
    current = payload
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return _MISSING
            current = current[index]
        else:
            return _MISSING
    return current


def extract_number(
    payload: Any, path: str, default: float | None = None
) -> FieldResult[float]:
    raw = dig(payload, path)
    if raw is _MISSING or raw is None:
        return FieldResult.defaulted(default, path)
    if isinstance(raw, bool):
        return FieldResult.malformed(path, f"expected number, got {raw!r}")
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return FieldResult.malformed(
                path, f"expected number, got {raw!r}"
            )
    else:
        return FieldResult.malformed(
            path, f"expected number, got {type(raw).__name__}"
        )
    if not math.isfinite(number):
        return FieldResult.malformed(path, f"non-finite value {raw!r}")
    return FieldResult.valid(number, path)


def extract_text(
    payload: Any, path: str, default: str | None = None
) -> FieldResult[str]:
    raw = dig(payload, path)
    if raw is _MISSING or raw is None:
        return FieldResult.defaulted(default, path)
    if isinstance(raw, str):
        return FieldResult.valid(raw, path)
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return FieldResult.valid(str(raw), path)
    return FieldResult.malformed(
        path, f"expected text, got {type(raw).__name__}"
    )


def extract_list(payload: Any, path: str) -> FieldResult[list]:
    raw = dig(payload, path)
    if raw is _MISSING or raw is None:
        return FieldResult.defaulted([], path)
    if isinstance(raw, list):
        return FieldResult.valid(raw, path)
    return FieldResult.malformed(
        path, f"expected list, got {type(raw).__name__}"
    )


def parse_timestamp_ms(
    raw: Any, path: str = "time", utc_offset_seconds: int = 0
) -> FieldResult[int]:
    """
    Parse an ISO 8601 string or epoch seconds into epoch milliseconds.

    Naive ISO strings are interpreted as local time shifted by
    `utc_offset_seconds` (Open-Meteo style).
    """
    if raw is None or raw == "":
        return FieldResult.malformed(path, "timestamp missing")
    if isinstance(raw, bool):
        return FieldResult.malformed(path, f"invalid timestamp {raw!r}")
    if isinstance(raw, (int, float)):
        return FieldResult.valid(int(raw * 1000), path)
    if not isinstance(raw, str):
        return FieldResult.malformed(path, f"invalid timestamp {raw!r}")
    try:
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return FieldResult.malformed(path, f"invalid timestamp {raw!r}")
    if moment.tzinfo is None:
        epoch = moment.replace(tzinfo=timezone.utc).timestamp()
        epoch -= utc_offset_seconds
    else:
        epoch = moment.timestamp()
    return FieldResult.valid(int(round(epoch * 1000)), path)


def parse_calendar_date(raw: Any, path: str = "date") -> FieldResult[date]:
    """
    Calendar date of a daily record.

    Accepts "YYYY-MM-DD" or an ISO datetime; for datetimes the date is
    taken in the offset the provider reported, not in UTC.
    """
    if not isinstance(raw, str) or not raw:
        return FieldResult.malformed(path, f"invalid date {raw!r}")
    try:
        if len(raw) == 10:
            return FieldResult.valid(date.fromisoformat(raw), path)
        moment = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return FieldResult.malformed(path, f"invalid date {raw!r}")
    return FieldResult.valid(moment.date(), path)
