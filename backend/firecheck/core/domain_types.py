"""Domain Types — identity types, fixed vocabularies and the facility rank table.

Invariants:
    - SiteId, InspectionId, IssueId wrap the uuid4 text assigned by the adapter
    - FACILITY_RANK covers exactly the 8 FacilityType members, ranks 1..8
    - All fixed vocabularies encoded as str Enums — no raw string matching

Design Decisions:
    - NewType over wrappers: zero runtime cost, ids stay plain str for JSON and SQL
    - str Enums: serialize to JSON without custom encoders, compare equal to their value
    - Issue.facility_type stays str (not FacilityType) so legacy rows with an unknown
      category still load and aggregate (ranked last)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SiteId = NewType("SiteId", str)
InspectionId = NewType("InspectionId", str)
IssueId = NewType("IssueId", str)


# ─── Enums ───────────────────────────────────────────────────────

class FacilityType(str, Enum):
    """The 8 facility categories an Issue is filed under."""
    FIRE_SUPPRESSION = "소화설비"
    ALARM = "경보설비"
    EVACUATION = "피난구조설비"
    WATER_SUPPLY = "소화용수설비"
    FIRE_RESPONSE = "소화활동설비"
    SAFETY_INSTALLATIONS = "안전시설등"
    RECOMMENDATIONS = "권고사항"
    OTHER = "기타"


class InspectionType(str, Enum):
    """Inspection kinds — operational check or comprehensive check."""
    OPERATIONAL = "작동점검"
    COMPREHENSIVE = "종합점검"


class EntityKind(str, Enum):
    """Collections reachable through the persistence adapter."""
    SITE = "site"
    INSPECTION = "inspection"
    ISSUE = "issue"
    DESCRIPTION_HISTORY = "description_history"
    LOCATION_HISTORY = "location_history"


class HistoryTable(str, Enum):
    """The two autocomplete history tables."""
    DESCRIPTIONS = "descriptions"
    LOCATIONS = "locations"

    @property
    def entity_kind(self) -> EntityKind:
        if self is HistoryTable.DESCRIPTIONS:
            return EntityKind.DESCRIPTION_HISTORY
        return EntityKind.LOCATION_HISTORY


# ─── Constants ───────────────────────────────────────────────────

FACILITY_RANK: dict[str, int] = {
    facility.value: rank
    for rank, facility in enumerate(FacilityType, start=1)
}

UNKNOWN_SITE_NAME = "Unknown"
