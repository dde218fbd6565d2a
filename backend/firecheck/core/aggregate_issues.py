"""Issue Aggregation — groups one inspection's issues into ordered facility sections.

Invariants:
    - PURE: same issue sequence + same rank table -> deep-equal output, every time
    - Groups keyed by (description, location) within a facility, first-appearance order
    - detail_locations: trimmed, non-empty, exact-match deduplicated, first-seen order
    - Facilities ordered by rank ascending; unranked categories after every ranked one;
      equal ranks keep first-appearance order
    - Every input issue appears in exactly one group, in input order

Design Decisions:
    - Single implementation shared by every renderer through build_report: grouping is
      never re-derived at a call site
    - Output is frozen dataclasses of tuples: equality is structural, no aliasing
    - Groups keep the underlying Issue records so a caller can edit or delete one
      specific original issue from a grouped view
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from firecheck.core.domain_types import FACILITY_RANK
from firecheck.core.records import Issue


@dataclass(frozen=True)
class GroupedIssue:
    """Issues sharing facility type, description and location."""
    facility_type: str
    description: str
    location: str
    detail_locations: tuple[str, ...]
    issues: tuple[Issue, ...]


@dataclass(frozen=True)
class FacilitySection:
    """All groups of one facility type, in first-appearance order."""
    facility_type: str
    groups: tuple[GroupedIssue, ...]


def dedupe_detail_locations(issues: Iterable[Issue]) -> tuple[str, ...]:
    """Trimmed, non-empty detail locations without duplicates, first-seen order."""
    seen: list[str] = []
    for issue in issues:
        detail = (issue.detail_location or "").strip()
        if detail and detail not in seen:
            seen.append(detail)
    return tuple(seen)


def order_facilities(
    facility_types: Iterable[str], rank: Mapping[str, int] = FACILITY_RANK,
) -> list[str]:
    """Rank ascending, unknown last, ties by the given (first-appearance) order."""
    unranked = max(rank.values(), default=0) + 1
    # sorted() is stable: equal keys keep input order
    return sorted(facility_types, key=lambda f: rank.get(f, unranked))


def aggregate_issues(
    issues: Iterable[Issue], rank: Mapping[str, int] = FACILITY_RANK,
) -> tuple[FacilitySection, ...]:
    """Partition by facility, group by (description, location), order facilities."""
    partitions: dict[str, dict[tuple[str, str], list[Issue]]] = {}
    for issue in issues:
        groups = partitions.setdefault(issue.facility_type, {})
        groups.setdefault((issue.description, issue.location), []).append(issue)

    return tuple(
        FacilitySection(
            facility_type=facility,
            groups=tuple(
                GroupedIssue(
                    facility_type=facility,
                    description=description,
                    location=location,
                    detail_locations=dedupe_detail_locations(members),
                    issues=tuple(members),
                )
                for (description, location), members in partitions[facility].items()
            ),
        )
        for facility in order_facilities(partitions, rank)
    )
