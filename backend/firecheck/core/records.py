"""Entity Records — immutable typed records for Site, Inspection, Issue and HistoryEntry.

Invariants:
    - Every record is a frozen dataclass: snapshots share records, never copy-and-mutate
    - Inspection.issues is ordered oldest first and only holds issues of that inspection
    - from_row accepts both adapter shapes: datetime objects (SQL) and ISO strings (JSON)
    - Entity writes go out as validated schema payloads; only HistoryEntry has to_row

Design Decisions:
    - Dataclasses in core, pydantic only at the boundary (schemas/): core stays
      dependency-free and pure
    - Rows are plain dicts: the adapter contract speaks dicts, the store speaks records
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone

from firecheck.core.domain_types import SiteId, InspectionId, IssueId


def parse_datetime(value: datetime | str | None) -> datetime | None:
    """Normalize an adapter timestamp to an aware UTC datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


@dataclass(frozen=True)
class Site:
    """A physical location subject to fire-safety inspection."""
    id: SiteId
    name: str
    address: str
    created_at: datetime
    phone: str | None = None
    manager_name: str | None = None
    manager_phone: str | None = None
    manager_email: str | None = None
    approval_date: date | None = None
    notes: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Site":
        return cls(
            id=SiteId(str(row["id"])),
            name=row["name"],
            address=row["address"],
            created_at=parse_datetime(row["created_at"]),
            phone=row.get("phone"),
            manager_name=row.get("manager_name"),
            manager_phone=row.get("manager_phone"),
            manager_email=row.get("manager_email"),
            approval_date=parse_date(row.get("approval_date")),
            notes=row.get("notes"),
        )


@dataclass(frozen=True)
class Issue:
    """One recorded deficiency or recommendation found during an inspection."""
    id: IssueId
    inspection_id: InspectionId
    facility_type: str
    description: str
    location: str
    created_at: datetime
    detail_location: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Issue":
        return cls(
            id=IssueId(str(row["id"])),
            inspection_id=InspectionId(str(row["inspection_id"])),
            facility_type=row["facility_type"],
            description=row["description"],
            location=row["location"],
            created_at=parse_datetime(row["created_at"]),
            detail_location=row.get("detail_location"),
        )


@dataclass(frozen=True)
class Inspection:
    """One inspection event at a site; owns its ordered issues."""
    id: InspectionId
    site_id: SiteId
    inspector: str
    inspection_type: str
    created_at: datetime
    notes: str | None = None
    issues: tuple[Issue, ...] = ()

    @classmethod
    def from_row(cls, row: dict, issues: tuple[Issue, ...] = ()) -> "Inspection":
        return cls(
            id=InspectionId(str(row["id"])),
            site_id=SiteId(str(row["site_id"])),
            inspector=row["inspector"],
            inspection_type=row["inspection_type"],
            created_at=parse_datetime(row["created_at"]),
            notes=row.get("notes"),
            issues=issues,
        )

    def with_issues(self, issues: tuple[Issue, ...]) -> "Inspection":
        return replace(self, issues=issues)


@dataclass(frozen=True)
class HistoryEntry:
    """Frequency/recency record of a previously used description or location."""
    text: str
    count: int
    last_used: datetime

    @classmethod
    def from_row(cls, row: dict) -> "HistoryEntry":
        return cls(
            text=row["text"],
            count=int(row["count"]),
            last_used=parse_datetime(row["last_used"]),
        )

    def to_row(self) -> dict:
        return {"text": self.text, "count": self.count, "last_used": self.last_used}
