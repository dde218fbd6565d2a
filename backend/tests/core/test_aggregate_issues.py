"""Aggregation tests — grouping, detail-location dedup and facility ordering.

Tests cover:
    - Determinism (same input -> deep-equal output)
    - Detail-location trimming and dedup
    - Facility rank ordering, unknown categories last
    - The Riverside Tower walkthrough
"""

from firecheck.core.aggregate_issues import (
    aggregate_issues, dedupe_detail_locations, order_facilities,
)
from firecheck.core.domain_types import FACILITY_RANK

from tests.factories import make_issue


def _issues(*specs):
    return [
        make_issue(f"x{n}", facility_type=f, description=d, location=loc, detail_location=dl)
        for n, (f, d, loc, dl) in enumerate(specs, start=1)
    ]


# --- Determinism --------------------------------------------------------------

def test_repeated_calls_are_deep_equal():
    issues = _issues(
        ("기타", "A", "1F", None),
        ("소화설비", "B", "2F", "계단"),
        ("소화설비", "B", "2F", "복도"),
    )
    assert aggregate_issues(issues) == aggregate_issues(issues)
    assert aggregate_issues(issues) == aggregate_issues(list(issues))


def test_empty_input_gives_no_sections():
    assert aggregate_issues([]) == ()


# --- Detail locations ---------------------------------------------------------

def test_detail_locations_trimmed_and_deduplicated():
    issues = _issues(
        ("소화설비", "호스 손상", "1F", "3층"),
        ("소화설비", "호스 손상", "1F", " 3층 "),
        ("소화설비", "호스 손상", "1F", ""),
        ("소화설비", "호스 손상", "1F", "지하1층"),
    )
    (section,) = aggregate_issues(issues)
    (group,) = section.groups
    assert group.detail_locations == ("3층", "지하1층")
    assert len(group.issues) == 4


def test_detail_locations_none_and_whitespace_dropped():
    issues = _issues(("기타", "A", "1F", None), ("기타", "A", "1F", "   "))
    assert dedupe_detail_locations(issues) == ()


# --- Grouping -----------------------------------------------------------------

def test_groups_keyed_by_description_and_location():
    issues = _issues(
        ("소화설비", "A", "1F", None),
        ("소화설비", "A", "2F", None),
        ("소화설비", "B", "1F", None),
        ("소화설비", "A", "1F", None),
    )
    (section,) = aggregate_issues(issues)
    keys = [(g.description, g.location) for g in section.groups]
    assert keys == [("A", "1F"), ("A", "2F"), ("B", "1F")]
    assert [i.id for i in section.groups[0].issues] == ["x1", "x4"]


def test_every_issue_lands_in_exactly_one_group():
    issues = _issues(
        ("경보설비", "A", "1F", None),
        ("소화설비", "A", "1F", None),
        ("경보설비", "A", "1F", None),
    )
    grouped = [
        i.id for s in aggregate_issues(issues) for g in s.groups for i in g.issues
    ]
    assert sorted(grouped) == ["x1", "x2", "x3"]


def test_same_text_different_facility_not_merged():
    issues = _issues(("소화설비", "A", "1F", None), ("경보설비", "A", "1F", None))
    sections = aggregate_issues(issues)
    assert [len(s.groups) for s in sections] == [1, 1]


# --- Facility ordering --------------------------------------------------------

def test_facilities_follow_rank_table():
    issues = _issues(
        ("기타", "A", "1F", None),
        ("소화설비", "B", "1F", None),
        ("경보설비", "C", "1F", None),
    )
    order = [s.facility_type for s in aggregate_issues(issues)]
    assert order == ["소화설비", "경보설비", "기타"]


def test_unknown_facilities_after_known_in_first_appearance_order():
    order = order_facilities(["미분류", "기타", "구형", "소화설비"])
    assert order == ["소화설비", "기타", "미분류", "구형"]


def test_custom_rank_table():
    rank = {"경보설비": 1, "소화설비": 2}
    issues = _issues(("소화설비", "A", "1F", None), ("경보설비", "B", "1F", None))
    order = [s.facility_type for s in aggregate_issues(issues, rank)]
    assert order == ["경보설비", "소화설비"]


def test_rank_table_covers_every_facility_type():
    assert sorted(FACILITY_RANK.values()) == list(range(1, 9))


# --- Walkthrough --------------------------------------------------------------

def test_riverside_tower_walkthrough():
    issues = _issues(
        ("소화설비", "호스 손상", "1F", ""),
        ("소화설비", "호스 손상", "1F", "계단실"),
        ("경보설비", "감지기 오작동", "2F", ""),
    )
    suppression, alarm = aggregate_issues(issues)

    assert suppression.facility_type == "소화설비"
    (hose,) = suppression.groups
    assert (hose.description, hose.location) == ("호스 손상", "1F")
    assert len(hose.issues) == 2
    assert hose.detail_locations == ("계단실",)

    assert alarm.facility_type == "경보설비"
    (detector,) = alarm.groups
    assert detector.detail_locations == ()
