# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for report aggregation.
"""

from datetime import datetime, timezone

import pytest

from domain.months import MonthKey
from domain.reports import (
    _round_half_up, build_activity_summary, build_field_service_report,
    build_member_sheet, build_monthly_report, build_pioneer_summary,
    build_report_status, build_sheet_member, classify_activity,
    discover_auxiliary_pioneers, find_members_needing_help,
    group_reports_by_publisher
)
from models.enums import ActivityStatus

GENERATED_AT = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestRounding:
    """Test half-up rounding of displayed averages."""

    def test_rounds_half_up(self):
        assert _round_half_up(2.25, 1) == 2.3
        assert _round_half_up(2.5) == 3
        assert _round_half_up(66.666, 0) == 67

    def test_rounds_down_below_half(self):
        assert _round_half_up(2.24, 1) == 2.2


class TestMemberSheets:
    """Test S-21 member sheet construction."""

    def test_sheet_member_defaults(self, make_member):
        member = make_member("Anna Baker", role="")

        sheet_member = build_sheet_member(member)

        assert sheet_member.group == "Unassigned"
        assert sheet_member.role == "publisher"
        assert sheet_member.date_of_birth == ""
        assert sheet_member.date_of_baptism == ""
        assert sheet_member.privileges.other_sheep is True

    def test_sheet_member_dates_are_iso(self, make_member):
        member = make_member(
            "Anna Baker",
            group_name="North Group",
            dob=datetime(1980, 5, 17),
            baptized_date=datetime(1998, 7, 4)
        )

        sheet_member = build_sheet_member(member)

        assert sheet_member.date_of_birth == "1980-05-17"
        assert sheet_member.date_of_baptism == "1998-07-04"
        assert sheet_member.group == "North Group"

    def test_sheet_rows_are_in_month_order_with_totals(self, make_member, make_report):
        member = make_member("Anna Baker")
        reports = [
            make_report(member, "2024-03", hours=7, bible_students=1),
            make_report(member, "2024-01", hours=5),
            make_report(member, "2024-02", hours=3, bible_students=2, auxiliary_pioneer=True),
        ]

        sheet = build_member_sheet(build_sheet_member(member), reports)

        assert [row.month for row in sheet.reports] == ["2024-01", "2024-02", "2024-03"]
        assert sheet.totals.hours == 15
        assert sheet.totals.bible_studies == 3
        assert sheet.has_auxiliary_pioneer_reports is True

    def test_group_reports_by_publisher(self, make_report):
        reports = [
            make_report("a", "2024-02"),
            make_report("b", "2024-01"),
            make_report("a", "2024-01"),
        ]

        grouped = group_reports_by_publisher(reports)

        assert set(grouped) == {"a", "b"}
        assert [r.month for r in grouped["a"]] == ["2024-01", "2024-02"]


class TestFieldServiceReport:
    """Test the filtered field service report."""

    def test_three_elders_two_reported(self, make_member, make_report):
        elders = [
            make_member("Aaron Able", ["Elder"]),
            make_member("Ben Brown", ["Elder"]),
            make_member("Cal Cole", ["Elder"]),
        ]
        reports = [
            make_report(elders[0], "2024-01", hours=10, bible_students=1),
            make_report(elders[1], "2024-01", hours=15, bible_students=2),
        ]

        result = build_field_service_report(
            elders, reports, {"filterType": "privilege"}, "Sister Secretary", GENERATED_AT
        )

        summary = result.summary
        assert summary.total_members == 3
        assert summary.total_reports == 2
        assert summary.total_hours == 25
        assert summary.total_bible_studies == 3
        assert summary.average_hours == pytest.approx(8.333, rel=1e-3)
        assert summary.reporting_percentage == pytest.approx(66.667, rel=1e-3)
        assert len(result.member_reports) == 3
        assert result.member_reports[2].reports == []
        assert result.member_reports[2].totals.hours == 0

    def test_empty_member_set(self):
        result = build_field_service_report([], [], {}, "Sister Secretary", GENERATED_AT)

        assert result.summary.total_members == 0
        assert result.summary.total_reports == 0
        assert result.summary.average_hours == 0
        assert result.summary.reporting_percentage == 0
        assert result.member_reports == []

    def test_member_order_is_preserved(self, make_member):
        members = [make_member("Zed Young"), make_member("Abe Adams")]

        result = build_field_service_report(members, [], {}, "Sister Secretary", GENERATED_AT)

        assert [s.member.full_name for s in result.member_reports] == ["Zed Young", "Abe Adams"]

    def test_pioneer_totals(self, make_member, make_report):
        regular = make_member("Rita Reed", ["Regular Pioneer"])
        auxiliary = make_member("Alan Ash")
        reports = [
            make_report(regular, "2024-01", hours=50, bible_students=3),
            make_report(regular, "2024-02", hours=52, bible_students=2),
            make_report(auxiliary, "2024-01", hours=30, bible_students=1, auxiliary_pioneer=True),
            make_report(auxiliary, "2024-02", hours=4),
        ]

        result = build_field_service_report(
            [regular, auxiliary], reports, {}, "Sister Secretary", GENERATED_AT
        )

        totals = result.summary.pioneer_totals
        assert totals.regular_pioneers.count == 1
        assert totals.regular_pioneers.total_hours == 102
        assert totals.regular_pioneers.total_bible_studies == 5
        assert totals.auxiliary_pioneers.count == 1
        assert totals.auxiliary_pioneers.total_hours == 30
        assert totals.auxiliary_pioneers.total_bible_studies == 1

    def test_standing_auxiliary_privilege_is_not_a_monthly_flag(self, make_member, make_report):
        member = make_member("Alan Ash", ["Auxiliary Pioneer"])
        reports = [make_report(member, "2024-01", hours=30)]

        result = build_field_service_report([member], reports, {}, "Sister Secretary", GENERATED_AT)

        sheet = result.member_reports[0]
        assert sheet.member.privileges.auxiliary_pioneer is True
        assert sheet.has_auxiliary_pioneer_reports is False
        assert result.summary.pioneer_totals.auxiliary_pioneers.count == 0

    def test_serializes_with_camel_case_keys(self, make_member, make_report):
        member = make_member("Anna Baker")
        reports = [make_report(member, "2024-01", hours=5)]

        data = build_field_service_report(
            [member], reports, {"filterType": "all"}, "Sister Secretary", GENERATED_AT
        ).to_json_dict()

        assert data["generatedBy"] == "Sister Secretary"
        assert data["summary"]["pioneerTotals"]["regularPioneers"]["count"] == 0
        assert data["memberReports"][0]["member"]["fullName"] == "Anna Baker"
        assert data["memberReports"][0]["reports"][0]["bibleStudies"] == 0

    def test_generation_is_deterministic(self, make_member, make_report):
        member = make_member("Anna Baker", ["Regular Pioneer"])
        reports = [make_report(member, "2024-01", hours=5)]

        first = build_field_service_report([member], reports, {}, "Sister Secretary", GENERATED_AT)
        second = build_field_service_report([member], reports, {}, "Sister Secretary", GENERATED_AT)

        assert first.to_json_dict() == second.to_json_dict()


class TestPioneerSummary:
    """Test the pioneer summary report."""

    def test_month_buckets_cross_year_boundary(self):
        result = build_pioneer_summary(
            [], [], MonthKey(2024, 11), MonthKey(2025, 2), {}, "Sister Secretary",
            generated_at=GENERATED_AT
        )

        assert [m.month for m in result.months] == ["2024-11", "2024-12", "2025-01", "2025-02"]
        assert result.months[2].month_name == "January 2025"
        assert result.totals.regular_pioneers.average_count == 0

    def test_auxiliary_pioneer_without_privilege(self, make_member, make_report):
        member = make_member("Alan Ash")
        reports = [
            make_report(member, "2024-01", hours=3),
            make_report(member, "2024-02", hours=30, bible_students=2, auxiliary_pioneer=True),
            make_report(member, "2024-03", hours=6),
        ]

        result = build_pioneer_summary(
            [], reports, MonthKey(2024, 1), MonthKey(2024, 3), {}, "Sister Secretary",
            generated_at=GENERATED_AT
        )

        assert result.regular_pioneer_reports == []
        assert len(result.auxiliary_pioneer_reports) == 1
        sheet = result.auxiliary_pioneer_reports[0]
        assert sheet.member.full_name == "Alan Ash"
        assert [row.month for row in sheet.reports] == ["2024-01", "2024-02", "2024-03"]
        assert sheet.totals.hours == 39

        february = result.months[1]
        assert february.auxiliary_pioneers.count == 1
        assert february.auxiliary_pioneers.total_hours == 30
        assert result.totals.auxiliary_pioneers.total_count == 1
        assert result.totals.auxiliary_pioneers.average_count == pytest.approx(1 / 3)

    def test_regular_pioneer_totals_and_sheets(self, make_member, make_report):
        pioneer = make_member("Rita Reed", ["Regular Pioneer"])
        publisher = make_member("Paul Page")
        reports = [
            make_report(pioneer, "2024-01", hours=50, bible_students=2),
            make_report(pioneer, "2024-02", hours=55, bible_students=3),
            make_report(publisher, "2024-01", hours=4),
        ]

        result = build_pioneer_summary(
            [pioneer], reports, MonthKey(2024, 1), MonthKey(2024, 2), {}, "Sister Secretary",
            generated_at=GENERATED_AT
        )

        assert result.months[0].regular_pioneers.count == 1
        assert result.months[0].regular_pioneers.total_hours == 50
        assert result.totals.regular_pioneers.total_count == 2
        assert result.totals.regular_pioneers.average_count == 1
        assert result.totals.regular_pioneers.total_hours == 105
        assert result.totals.regular_pioneers.total_bible_studies == 5
        assert result.regular_pioneer_reports[0].totals.hours == 105
        assert result.auxiliary_pioneer_reports == []

    def test_regular_pioneer_flagged_auxiliary_counts_in_both(self, make_member, make_report):
        pioneer = make_member("Rita Reed", ["Regular Pioneer"])
        reports = [make_report(pioneer, "2024-01", hours=50, auxiliary_pioneer=True)]

        result = build_pioneer_summary(
            [pioneer], reports, MonthKey(2024, 1), MonthKey(2024, 1), {}, "Sister Secretary",
            generated_at=GENERATED_AT
        )

        assert result.months[0].regular_pioneers.count == 1
        assert result.months[0].auxiliary_pioneers.count == 1

    def test_auxiliary_sheet_uses_full_member_record(self, make_member, make_report):
        member = make_member("Alan Ash", group_name="North Group")
        reports = [make_report(member, "2024-01", hours=30, auxiliary_pioneer=True)]

        result = build_pioneer_summary(
            [], reports, MonthKey(2024, 1), MonthKey(2024, 1), {}, "Sister Secretary",
            members_by_id={member.id: member}, generated_at=GENERATED_AT
        )

        assert result.auxiliary_pioneer_reports[0].member.group == "North Group"

    def test_auxiliary_sheet_without_publisher_snapshot(self, make_report):
        reports = [make_report("orphan-id", "2024-01", hours=30, auxiliary_pioneer=True)]

        result = build_pioneer_summary(
            [], reports, MonthKey(2024, 1), MonthKey(2024, 1), {}, "Sister Secretary",
            generated_at=GENERATED_AT
        )

        sheet = result.auxiliary_pioneer_reports[0]
        assert sheet.member.id == "orphan-id"
        assert sheet.member.full_name == ""

    def test_discover_auxiliary_pioneers_keeps_stream_order(self, make_report):
        reports = [
            make_report("b", "2024-01", auxiliary_pioneer=True),
            make_report("a", "2024-01", auxiliary_pioneer=False),
            make_report("a", "2024-02", auxiliary_pioneer=True),
            make_report("b", "2024-02", auxiliary_pioneer=True),
        ]

        discovered = discover_auxiliary_pioneers(reports)

        assert list(discovered) == ["b", "a"]
        assert discovered["b"].month == "2024-01"


class TestMonthlyReport:
    """Test the monthly congregation report."""

    def test_reports_split_by_class(self, make_member, make_report):
        pioneer = make_member("Rita Reed", ["Regular Pioneer"])
        auxiliary = make_member("Alan Ash")
        publisher = make_member("Paul Page")
        reports = [
            make_report(pioneer, "2024-05", hours=50, bible_students=2),
            make_report(auxiliary, "2024-05", hours=30, bible_students=1, auxiliary_pioneer=True),
            make_report(publisher, "2024-05", hours=4, bible_students=1),
        ]

        result = build_monthly_report(
            MonthKey(2024, 5), reports, 12, set(), "Sister Secretary", GENERATED_AT
        )

        assert result.month == "2024-05"
        assert result.active_publishers == 12
        assert result.publishers.reports == 1
        assert result.publishers.bible_studies == 1
        assert result.auxiliary_pioneers.reports == 1
        assert result.auxiliary_pioneers.hours == 30
        assert result.regular_pioneers.reports == 1
        assert result.regular_pioneers.hours == 50

    def test_regular_pioneer_by_id(self, make_report):
        reports = [make_report("rp-1", "2024-05", hours=50)]

        result = build_monthly_report(
            MonthKey(2024, 5), reports, 1, {"rp-1"}, "Sister Secretary", GENERATED_AT
        )

        assert result.regular_pioneers.reports == 1
        assert result.publishers.reports == 0


class TestMembersNeedingHelp:
    """Test detection of members without a report or a Bible study."""

    def test_issues_per_member(self, make_member, make_report):
        studying = make_member("Anna Baker", group_name="North Group")
        no_study = make_member("Carl Dunn")
        silent = make_member("Eli Ford")
        reports = [
            make_report(studying, "2024-05", hours=8, bible_students=1),
            make_report(no_study, "2024-05", hours=3),
        ]

        result = find_members_needing_help([studying, no_study, silent], reports)

        assert [m.full_name for m in result] == ["Carl Dunn", "Eli Ford"]
        assert result[0].issues.no_report is False
        assert result[0].issues.no_study is True
        assert result[0].group_name == "No Group"
        assert result[1].issues.no_report is True
        assert result[1].issues.no_study is True


class TestReportStatus:
    """Test per-member submission status."""

    def test_status_per_member(self, make_member, make_report):
        reported = make_member("Anna Baker", ["Regular Pioneer"])
        missing = make_member("Carl Dunn")
        report = make_report(reported, "2024-05", hours=50)

        result = build_report_status([reported, missing], [report], MonthKey(2024, 5))

        assert result[0].has_reported is True
        assert result[0].report_id == report.id
        assert result[0].privileges == ["Regular Pioneer"]
        assert result[1].has_reported is False
        assert result[1].report_id is None
        assert all(status.month == "2024-05" for status in result)


class TestActivitySummary:
    """Test activity classification."""

    @pytest.mark.parametrize("months_reported,rate,avg_hours,expected", [
        (0, 0, 0, ActivityStatus.INACTIVE),
        (1, 33, 20, ActivityStatus.IRREGULAR),
        (3, 100, 0.5, ActivityStatus.LOW_ACTIVITY),
        (3, 100, 10, ActivityStatus.EXCELLENT),
        (3, 50, 5, ActivityStatus.ACTIVE),
    ])
    def test_classify_activity(self, months_reported, rate, avg_hours, expected):
        assert classify_activity(months_reported, rate, avg_hours) == expected

    def test_summary_categories(self, make_member, make_report):
        excellent = make_member("Anna Baker")
        irregular = make_member("Carl Dunn")
        inactive = make_member("Eli Ford")
        child = make_member("Finn Ford", ["Child"], excluded=True)
        reports = [
            make_report(excellent, "2024-01", hours=12, bible_students=1),
            make_report(excellent, "2024-02", hours=10),
            make_report(irregular, "2024-01", hours=2),
            make_report(child, "2024-02", hours=1),
        ]

        result = build_activity_summary(
            [excellent, irregular, inactive, child], reports,
            MonthKey(2024, 1), MonthKey(2024, 3), {}, "Sister Secretary", GENERATED_AT
        )

        summary = result.summary
        assert summary.total_members == 3
        assert summary.excellent_count == 1
        assert summary.irregular_count == 1
        assert summary.inactive_count == 1
        assert summary.needs_shepherding_count == 2
        assert summary.total_hours == 24
        assert summary.avg_hours_per_member == 8

        top = result.categories.excellent[0]
        assert top.avg_hours == 11
        assert top.reporting_rate == 67
        assert top.expected_months == 3
        assert top.status == "excellent"

        assert [t.month for t in result.trends] == ["2024-01", "2024-02", "2024-03"]
        assert result.trends[1].total_reports == 2
        assert result.trends[1].total_hours == 11
        assert result.trends[2].avg_hours == 0

    def test_empty_summary(self):
        result = build_activity_summary(
            [], [], MonthKey(2024, 1), MonthKey(2024, 1), {}, "Sister Secretary", GENERATED_AT
        )

        assert result.summary.total_members == 0
        assert result.summary.avg_hours_per_member == 0
        assert result.categories.needs_shepherding == []
