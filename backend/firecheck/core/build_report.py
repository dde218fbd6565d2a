"""Report Data — the one structure every report renderer consumes.

Invariants:
    - build_report is pure: output depends only on (inspection, site, rank)
    - sections come from aggregate_issues and nowhere else
    - site_name falls back to "Unknown" when the site is missing
    - total_issues counts raw issues, not groups
    - to_dict() emits only JSON-native values (str, int, list, dict, None)

Design Decisions:
    - Renderers (on-screen summary, shareable text, paginated document) live outside
      the engine; they receive Report and never regroup issues themselves
    - Report carries the header fields the document renderer prints (address,
      inspector, inspection type, site notes) so no renderer re-reads the store
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date

from firecheck.core.aggregate_issues import (
    FacilitySection, GroupedIssue, aggregate_issues,
)
from firecheck.core.domain_types import FACILITY_RANK, UNKNOWN_SITE_NAME
from firecheck.core.records import Inspection, Issue, Site


@dataclass(frozen=True)
class Report:
    """Aggregated, render-ready view of one inspection."""
    site_name: str
    date: date
    sections: tuple[FacilitySection, ...]
    notes: str | None
    site_address: str | None
    site_notes: str | None
    inspector: str
    inspection_type: str
    total_issues: int

    def to_dict(self) -> dict:
        return {
            "site_name": self.site_name,
            "date": self.date.isoformat(),
            "sections": [_section_to_dict(s) for s in self.sections],
            "notes": self.notes,
            "site_address": self.site_address,
            "site_notes": self.site_notes,
            "inspector": self.inspector,
            "inspection_type": self.inspection_type,
            "total_issues": self.total_issues,
        }


def build_report(
    inspection: Inspection,
    site: Site | None,
    rank: Mapping[str, int] = FACILITY_RANK,
) -> Report:
    """Build the report data contract for one inspection. Pure, no IO."""
    return Report(
        site_name=site.name if site else UNKNOWN_SITE_NAME,
        date=inspection.created_at.date(),
        sections=aggregate_issues(inspection.issues, rank),
        notes=inspection.notes,
        site_address=site.address if site else None,
        site_notes=site.notes if site else None,
        inspector=inspection.inspector,
        inspection_type=inspection.inspection_type,
        total_issues=len(inspection.issues),
    )


def _section_to_dict(section: FacilitySection) -> dict:
    return {
        "facility_type": section.facility_type,
        "groups": [_group_to_dict(g) for g in section.groups],
    }


def _group_to_dict(group: GroupedIssue) -> dict:
    return {
        "description": group.description,
        "location": group.location,
        "detail_locations": list(group.detail_locations),
        "issues": [_issue_to_dict(i) for i in group.issues],
    }


def _issue_to_dict(issue: Issue) -> dict:
    return {
        "id": issue.id,
        "inspection_id": issue.inspection_id,
        "facility_type": issue.facility_type,
        "description": issue.description,
        "location": issue.location,
        "detail_location": issue.detail_location,
        "created_at": issue.created_at.isoformat(),
    }
