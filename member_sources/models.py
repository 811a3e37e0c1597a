"""
Chapter API Models - Normalized records for roster and metric responses.

Every collaborator payload is parsed into one of these records. Missing
numeric fields default to 0 and missing text fields to "N/A", so nothing
downstream needs to inspect nested, possibly-absent keys.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from member_sources.exceptions import MalformedMetricResponse


logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
ALL_FILTER = "all"

_YEAR_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")

# Date formats seen in backend records, tried after ISO-8601
_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y")


class RecordStatus(Enum):
    """Moderation status of a BDM or business record."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "RecordStatus":
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


@dataclass(frozen=True, order=True)
class YearMonth:
    """A reporting month."""
    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {self.month}")
        if self.year < 1:
            raise ValueError(f"Invalid year: {self.year}")

    @classmethod
    def parse(cls, value: str) -> "YearMonth":
        """Parse a "YYYY-MM" string (the value of an HTML month input)."""
        match = _YEAR_MONTH_RE.match(value or "")
        if not match:
            raise ValueError(f"Invalid month '{value}', expected YYYY-MM")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def of(cls, day: date) -> "YearMonth":
        return cls(day.year, day.month)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def to_params(self) -> dict[str, int]:
        """Query parameters understood by the points endpoints."""
        return {"month": self.month, "year": self.year}

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


# ============================================================
# PAYLOAD HELPERS
# ============================================================

def unwrap(payload: Any) -> Any:
    """
    Strip ``{"data": ...}`` envelopes (possibly nested).

    Keys beside ``data`` (success, message, count, month, ...) are
    envelope metadata and are discarded.
    """
    while isinstance(payload, dict) and "data" in payload:
        inner = payload["data"]
        if inner is None:
            return {}
        payload = inner
    return payload


def unwrap_list(payload: Any) -> list[dict[str, Any]]:
    """Unwrap an envelope and return only the dict rows of a list payload."""
    payload = unwrap(payload)
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, dict)]


def _lookup(payload: dict[str, Any], name: str) -> Any:
    if name in payload:
        return payload[name]
    stats = payload.get("stats")
    if isinstance(stats, dict) and name in stats:
        return stats[name]
    return None


def require_number(payload: Any, name: str, source_name: Optional[str] = None) -> int:
    """
    Read an integer metric field.

    Looks at the top level first, then under ``stats``. Fractional values are
    floored.

    Raises:
        MalformedMetricResponse: field missing or not numeric
    """
    if not isinstance(payload, dict):
        raise MalformedMetricResponse(
            message="Metric payload is not an object",
            source_name=source_name,
            field_name=name,
            raw_data=payload,
        )
    value = _lookup(payload, name)
    if value is None or isinstance(value, bool):
        raise MalformedMetricResponse(
            message=f"Missing field '{name}'",
            source_name=source_name,
            field_name=name,
            raw_data=payload,
        )
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedMetricResponse(
            message=f"Field '{name}' is not numeric: {value!r}",
            source_name=source_name,
            field_name=name,
            raw_data=payload,
            original_error=e,
        )
    if math.isnan(number) or math.isinf(number):
        raise MalformedMetricResponse(
            message=f"Field '{name}' is not finite: {value!r}",
            source_name=source_name,
            field_name=name,
            raw_data=payload,
        )
    return math.floor(number)


def read_number(payload: Any, name: str, source_name: Optional[str] = None, default: int = 0) -> int:
    """Like require_number() but returns ``default`` for malformed fields."""
    try:
        return require_number(payload, name, source_name)
    except MalformedMetricResponse as e:
        logger.debug(f"Defaulting {name} to {default}: {e}")
        return default


def read_text(payload: dict[str, Any], *names: str, default: str = NOT_AVAILABLE) -> str:
    for name in names:
        value = payload.get(name)
        if value is not None and str(value).strip():
            return str(value)
    return default


def read_id(payload: dict[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = payload.get(name)
        if isinstance(value, dict):
            value = value.get("id")
        if value is not None and value != "":
            return str(value)
    return None


def parse_date(value: Any) -> Optional[date]:
    """Parse a record date; returns None when it cannot be understood."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def is_unset_filter(value: Optional[str]) -> bool:
    """Empty or ``"all"`` (any case, any padding) means no filter."""
    return value is None or not value.strip() or value.strip().lower() == ALL_FILTER


def parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


# ============================================================
# ROSTER
# ============================================================

@dataclass(frozen=True)
class Member:
    """A roster entry. Read-only to scoring."""
    id: str
    name: str
    chapter: str = NOT_AVAILABLE
    profile_image: Optional[str] = None
    chapter_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Member":
        """
        Build from a roster row.

        Accepts backend naming (``full_name``, ``chapter_name``,
        ``chapter_id``) as well as plain ``name``/``chapter``. A nested
        chapter object contributes its name and id.

        Raises:
            ValueError: row has no id
        """
        member_id = read_id(data, "id", "member_id", "_id")
        if member_id is None:
            raise ValueError(f"Roster row without id: {data!r}"[:200])

        chapter = data.get("chapter")
        chapter_id = read_id(data, "chapter_id")
        if isinstance(chapter, dict):
            chapter_id = chapter_id or read_id(chapter, "id", "chapter_id")
            chapter = read_text(chapter, "name", "chapter_name")

        return cls(
            id=member_id,
            name=read_text(data, "full_name", "name"),
            chapter=read_text(data, "chapter_name") if data.get("chapter_name") else (
                str(chapter) if chapter else NOT_AVAILABLE
            ),
            profile_image=data.get("profile_image") or None,
            chapter_id=chapter_id,
        )

    def in_chapter(self, chapter: Optional[str]) -> bool:
        """
        Whether the member belongs to ``chapter``, given as a chapter id
        (what the console's chapter select sends) or a chapter name.
        """
        if is_unset_filter(chapter):
            return True
        wanted = chapter.strip().lower()
        if self.chapter_id is not None and self.chapter_id.strip().lower() == wanted:
            return True
        return self.chapter.lower() == wanted

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "chapter": self.chapter,
            "chapter_id": self.chapter_id,
            "profile_image": self.profile_image,
        }


# ============================================================
# METRIC RECORDS
# ============================================================

@dataclass(frozen=True)
class AttendancePoints:
    """Attendance collaborator answer; ``points`` is already scored upstream."""
    points: int = 0
    meetings_total: int = 0
    meetings_present: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "AttendancePoints":
        payload = unwrap(payload)
        return cls(
            points=read_number(payload, "points", "attendance"),
            meetings_total=read_number(payload, "meetings_total", "attendance"),
            meetings_present=read_number(payload, "meetings_present", "attendance"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": self.points,
            "meetings_total": self.meetings_total,
            "meetings_present": self.meetings_present,
        }


@dataclass(frozen=True)
class PointsSummary:
    """Referral, visitor and social/training collaborators share this shape."""
    points: int = 0
    total_count: int = 0

    @classmethod
    def from_payload(cls, payload: Any, source_name: Optional[str] = None) -> "PointsSummary":
        payload = unwrap(payload)
        return cls(
            points=read_number(payload, "points", source_name),
            total_count=read_number(payload, "total_count", source_name),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"points": self.points, "total_count": self.total_count}


@dataclass(frozen=True)
class BdmRecord:
    """A logged Business Development Meeting between two members."""
    given_by_member_id: Optional[str]
    received_member_id: Optional[str]
    date: Optional[date]
    status: RecordStatus

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BdmRecord":
        return cls(
            given_by_member_id=read_id(data, "given_by_member_id", "given_by", "member_id"),
            received_member_id=read_id(data, "received_member_id", "received_by", "receiver"),
            # meeting date wins over the row's creation time
            date=parse_date(data.get("date") or data.get("bdmDate") or data.get("created_at")),
            status=RecordStatus.parse(data.get("status")),
        )

    @property
    def is_verified(self) -> bool:
        return self.status is RecordStatus.VERIFIED


@dataclass(frozen=True)
class BusinessRecord:
    """Business passed from one member to another."""
    actor_member_id: Optional[str]
    amount: Optional[Decimal]
    date: Optional[date]
    status: RecordStatus

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BusinessRecord":
        return cls(
            actor_member_id=read_id(data, "actor_member_id", "member_id", "given_by"),
            amount=parse_amount(data.get("amount")),
            date=parse_date(data.get("date") or data.get("businessDate") or data.get("created_at")),
            status=RecordStatus.parse(data.get("status")),
        )

    @property
    def is_verified(self) -> bool:
        return self.status is RecordStatus.VERIFIED


@dataclass
class ApiStats:
    """Request counters for one client instance."""
    request_count: int = 0
    success_count: int = 0
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    per_endpoint_errors: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_count": self.request_count,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "per_endpoint_errors": dict(self.per_endpoint_errors),
        }
