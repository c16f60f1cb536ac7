# SPDX-License-Identifier: Apache-2.0

"""
Field service report aggregation.

Pure functions that turn member snapshots and monthly report rows into
summaries and per-member S-21 report sheets. Nothing here touches the
database; the report service fetches members and reports and hands them in.

Two meanings of "auxiliary pioneer" are kept apart throughout:
the standing privilege (``PrivilegeFlags.auxiliary_pioneer``) and the monthly
report flag (``FieldServiceReport.auxiliary_pioneer``). Pioneer totals and the
pioneer summary use the monthly flag only.
"""

import math
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from models.entities import FieldServiceReport, Member, ReportPublisher
from models.enums import ActivityStatus
from models.responses import (
    ActivityCategories, ActivitySummaryResult, ActivityTotals,
    FieldServiceReportResult, HelpIssues, MemberActivity, MemberNeedingHelp,
    MemberReportSheet, MemberReportStatus, MonthBucket, MonthlyReportResult,
    MonthlyTrend, PioneerClassTotals, PioneerMonthTotals, PioneerRangeTotals,
    PioneerSummaryResult, PioneerSummaryTotals, PioneerTotals,
    PublisherMonthTotals, ReportSummary, SheetMember, SheetReportRow,
    SheetTotals
)
from .months import MonthKey, count_months, month_range
from .privileges import privilege_flags

DEFAULT_GROUP_LABEL = "Unassigned"
NO_GROUP_LABEL = "No Group"
DEFAULT_ROLE = "publisher"

IRREGULAR_RATE_THRESHOLD = 50
LOW_ACTIVITY_HOURS_THRESHOLD = 1
EXCELLENT_HOURS_THRESHOLD = 10


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero for non-negative figures (2.25 -> 2.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _format_date(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value else ""


def sum_hours(reports: Iterable[FieldServiceReport]) -> float:
    return sum(report.hours for report in reports)


def sum_bible_studies(reports: Iterable[FieldServiceReport]) -> int:
    return sum(report.bible_students for report in reports)


def sort_by_month(reports: Iterable[FieldServiceReport]) -> List[FieldServiceReport]:
    """Stable sort of reports by month key."""
    return sorted(reports, key=lambda report: report.month)


def group_reports_by_publisher(
    reports: Iterable[FieldServiceReport]
) -> Dict[str, List[FieldServiceReport]]:
    """Map publisher ID to that publisher's reports in month order."""
    grouped: Dict[str, List[FieldServiceReport]] = {}
    for report in sort_by_month(reports):
        grouped.setdefault(report.publisher_id, []).append(report)
    return grouped


def has_auxiliary_pioneer_reports(reports: Iterable[FieldServiceReport]) -> bool:
    """Whether any report carries the monthly auxiliary pioneer flag."""
    return any(report.auxiliary_pioneer for report in reports)


# Member report sheets

def build_sheet_member(member: Member) -> SheetMember:
    """S-21 identity block for a member."""
    return SheetMember(
        id=member.id,
        full_name=member.full_name,
        date_of_birth=_format_date(member.dob),
        date_of_baptism=_format_date(member.baptized_date),
        gender=member.gender or "",
        role=member.role or DEFAULT_ROLE,
        group=member.group_name or DEFAULT_GROUP_LABEL,
        privileges=privilege_flags(member.privilege_tags)
    )


def build_sheet_member_from_publisher(publisher: ReportPublisher) -> SheetMember:
    """Identity block when only the report's publisher snapshot is known."""
    return SheetMember(
        id=publisher.id,
        full_name=publisher.full_name,
        privileges=privilege_flags(publisher.privilege_tags)
    )


def build_report_row(report: FieldServiceReport) -> SheetReportRow:
    return SheetReportRow(
        month=report.month,
        hours=report.hours,
        bible_studies=report.bible_students,
        auxiliary_pioneer=report.auxiliary_pioneer,
        comments=report.comments
    )


def build_member_sheet(
    sheet_member: SheetMember,
    reports: Sequence[FieldServiceReport]
) -> MemberReportSheet:
    """Combine an identity block with the member's in-range reports."""
    ordered = sort_by_month(reports)
    return MemberReportSheet(
        member=sheet_member,
        has_auxiliary_pioneer_reports=has_auxiliary_pioneer_reports(ordered),
        reports=[build_report_row(report) for report in ordered],
        totals=SheetTotals(
            hours=sum_hours(ordered),
            bible_studies=sum_bible_studies(ordered)
        )
    )


# Field service report

def build_summary(
    members: Sequence[Member],
    reports: Sequence[FieldServiceReport],
    reports_by_member: Mapping[str, Sequence[FieldServiceReport]]
) -> ReportSummary:
    """
    Aggregate figures for the filtered member set.

    Averages are zero for an empty member set. Regular pioneers are members
    holding the standing privilege and contribute all of their reports;
    auxiliary pioneers are members with at least one flagged report and
    contribute the flagged reports only.
    """
    total_members = len(members)
    total_reports = len(reports)
    total_hours = sum_hours(reports)

    pioneer_totals = PioneerTotals()
    regular = pioneer_totals.regular_pioneers
    auxiliary = pioneer_totals.auxiliary_pioneers

    for member in members:
        member_reports = reports_by_member.get(member.id, [])

        if member.is_regular_pioneer:
            regular.count += 1
            regular.total_hours += sum_hours(member_reports)
            regular.total_bible_studies += sum_bible_studies(member_reports)

        flagged = [report for report in member_reports if report.auxiliary_pioneer]
        if flagged:
            auxiliary.count += 1
            auxiliary.total_hours += sum_hours(flagged)
            auxiliary.total_bible_studies += sum_bible_studies(flagged)

    return ReportSummary(
        total_members=total_members,
        total_reports=total_reports,
        total_hours=total_hours,
        total_bible_studies=sum_bible_studies(reports),
        average_hours=total_hours / total_members if total_members else 0,
        reporting_percentage=(total_reports / total_members) * 100 if total_members else 0,
        pioneer_totals=pioneer_totals
    )


def build_field_service_report(
    members: Sequence[Member],
    reports: Sequence[FieldServiceReport],
    filters: Dict[str, Any],
    generated_by: str,
    generated_at: Optional[datetime] = None
) -> FieldServiceReportResult:
    """
    Build the field service report for an already resolved member set.

    Args:
        members: Members in directory order (full name ascending)
        reports: Reports of those members within the requested range
        filters: Request filters echoed back to the caller
        generated_by: Display name of the requesting user
        generated_at: Generation timestamp, defaults to now

    Returns:
        FieldServiceReportResult with one sheet per member, in member order
    """
    reports_by_member = group_reports_by_publisher(reports)

    member_reports = [
        build_member_sheet(build_sheet_member(member), reports_by_member.get(member.id, []))
        for member in members
    ]

    return FieldServiceReportResult(
        summary=build_summary(members, reports, reports_by_member),
        member_reports=member_reports,
        filters=dict(filters),
        generated_at=generated_at or _now(),
        generated_by=generated_by
    )


# Pioneer summary

def _is_regular_pioneer_report(report: FieldServiceReport, regular_pioneer_ids: Set[str]) -> bool:
    if report.publisher is not None and report.publisher.is_regular_pioneer:
        return True
    return report.publisher_id in regular_pioneer_ids


def _class_totals(reports: Sequence[FieldServiceReport]) -> PioneerClassTotals:
    return PioneerClassTotals(
        count=len(reports),
        total_hours=sum_hours(reports),
        total_bible_studies=sum_bible_studies(reports)
    )


def _range_totals(class_totals: Sequence[PioneerClassTotals], month_count: int) -> PioneerRangeTotals:
    total_count = sum(totals.count for totals in class_totals)
    return PioneerRangeTotals(
        total_count=total_count,
        average_count=total_count / month_count if month_count else 0,
        total_hours=sum(totals.total_hours for totals in class_totals),
        total_bible_studies=sum(totals.total_bible_studies for totals in class_totals)
    )


def build_month_buckets(
    reports: Sequence[FieldServiceReport],
    start: MonthKey,
    end: MonthKey,
    regular_pioneer_ids: Set[str]
) -> List[MonthBucket]:
    """
    One bucket per calendar month from start to end inclusive.

    A report counts towards regular pioneers when its publisher holds the
    regular pioneer privilege and towards auxiliary pioneers when it carries
    the monthly flag. The two tests are independent.
    """
    reports_by_month: Dict[str, List[FieldServiceReport]] = {}
    for report in reports:
        reports_by_month.setdefault(report.month, []).append(report)

    buckets = []
    for month in month_range(start, end):
        month_reports = reports_by_month.get(str(month), [])
        regular = [r for r in month_reports if _is_regular_pioneer_report(r, regular_pioneer_ids)]
        auxiliary = [r for r in month_reports if r.auxiliary_pioneer]

        buckets.append(MonthBucket(
            month=str(month),
            month_name=month.label,
            regular_pioneers=_class_totals(regular),
            auxiliary_pioneers=_class_totals(auxiliary)
        ))

    return buckets


def discover_auxiliary_pioneers(reports: Sequence[FieldServiceReport]) -> "OrderedDict[str, FieldServiceReport]":
    """
    Distinct publishers with a flagged report, in report-stream order.

    The first flagged report seen for a publisher is kept as the one that
    introduced them.
    """
    discovered: "OrderedDict[str, FieldServiceReport]" = OrderedDict()
    for report in reports:
        if report.auxiliary_pioneer and report.publisher_id not in discovered:
            discovered[report.publisher_id] = report
    return discovered


def build_pioneer_summary(
    regular_pioneers: Sequence[Member],
    reports: Sequence[FieldServiceReport],
    start: MonthKey,
    end: MonthKey,
    filters: Dict[str, Any],
    generated_by: str,
    members_by_id: Optional[Mapping[str, Member]] = None,
    generated_at: Optional[datetime] = None
) -> PioneerSummaryResult:
    """
    Build the pioneer summary over a month range.

    Args:
        regular_pioneers: Members holding the regular pioneer privilege
        reports: Every report in the range, all publishers, in fetch order
        start: First month of the range
        end: Last month of the range
        filters: Request filters echoed back to the caller
        generated_by: Display name of the requesting user
        members_by_id: Optional member records used for auxiliary pioneer
            identity blocks; the report's publisher snapshot is used otherwise
        generated_at: Generation timestamp, defaults to now

    Returns:
        PioneerSummaryResult with month buckets, range totals and S-21 sheets
    """
    members_by_id = members_by_id or {}
    regular_pioneer_ids = {member.id for member in regular_pioneers}

    months = build_month_buckets(reports, start, end, regular_pioneer_ids)
    month_count = len(months)

    totals = PioneerSummaryTotals(
        regular_pioneers=_range_totals([m.regular_pioneers for m in months], month_count),
        auxiliary_pioneers=_range_totals([m.auxiliary_pioneers for m in months], month_count)
    )

    reports_by_publisher = group_reports_by_publisher(reports)

    regular_pioneer_reports = [
        build_member_sheet(build_sheet_member(member), reports_by_publisher.get(member.id, []))
        for member in regular_pioneers
    ]

    auxiliary_pioneer_reports = []
    for publisher_id, first_report in discover_auxiliary_pioneers(reports).items():
        member = members_by_id.get(publisher_id)
        if member is not None:
            sheet_member = build_sheet_member(member)
        elif first_report.publisher is not None:
            sheet_member = build_sheet_member_from_publisher(first_report.publisher)
        else:
            sheet_member = SheetMember(id=publisher_id, full_name="")

        # All of the publisher's in-range reports, not only the flagged one
        auxiliary_pioneer_reports.append(
            build_member_sheet(sheet_member, reports_by_publisher.get(publisher_id, []))
        )

    return PioneerSummaryResult(
        months=months,
        totals=totals,
        regular_pioneer_reports=regular_pioneer_reports,
        auxiliary_pioneer_reports=auxiliary_pioneer_reports,
        filters=dict(filters),
        generated_at=generated_at or _now(),
        generated_by=generated_by
    )


# Monthly congregation report

def build_monthly_report(
    month: MonthKey,
    month_reports: Sequence[FieldServiceReport],
    active_publisher_count: int,
    regular_pioneer_ids: Set[str],
    generated_by: str,
    generated_at: Optional[datetime] = None
) -> MonthlyReportResult:
    """
    Congregation figures for one month split by publisher class.

    Publishers are reports that are neither flagged auxiliary pioneer nor
    from a regular pioneer.
    """
    regular = [r for r in month_reports if _is_regular_pioneer_report(r, regular_pioneer_ids)]
    auxiliary = [r for r in month_reports if r.auxiliary_pioneer]
    publishers = [
        r for r in month_reports
        if not r.auxiliary_pioneer and not _is_regular_pioneer_report(r, regular_pioneer_ids)
    ]

    return MonthlyReportResult(
        month=str(month),
        active_publishers=active_publisher_count,
        publishers=PublisherMonthTotals(
            reports=len(publishers),
            bible_studies=sum_bible_studies(publishers)
        ),
        auxiliary_pioneers=PioneerMonthTotals(
            reports=len(auxiliary),
            hours=sum_hours(auxiliary),
            bible_studies=sum_bible_studies(auxiliary)
        ),
        regular_pioneers=PioneerMonthTotals(
            reports=len(regular),
            hours=sum_hours(regular),
            bible_studies=sum_bible_studies(regular)
        ),
        generated_at=generated_at or _now(),
        generated_by=generated_by
    )


def find_members_needing_help(
    members: Sequence[Member],
    month_reports: Sequence[FieldServiceReport]
) -> List[MemberNeedingHelp]:
    """Members with no report or no Bible study in the month."""
    reported = {report.publisher_id for report in month_reports}
    with_studies = {report.publisher_id for report in month_reports if report.bible_students > 0}

    needing_help = []
    for member in members:
        issues = HelpIssues(
            no_report=member.id not in reported,
            no_study=member.id not in with_studies
        )
        if issues.no_report or issues.no_study:
            needing_help.append(MemberNeedingHelp(
                id=member.id,
                full_name=member.full_name,
                group_name=member.group_name or NO_GROUP_LABEL,
                issues=issues
            ))

    return needing_help


def build_report_status(
    members: Sequence[Member],
    month_reports: Sequence[FieldServiceReport],
    month: MonthKey
) -> List[MemberReportStatus]:
    """Whether each member has submitted a report for the month."""
    report_ids = {report.publisher_id: report.id for report in month_reports}

    return [
        MemberReportStatus(
            id=member.id,
            full_name=member.full_name,
            privileges=list(member.privilege_names),
            has_reported=member.id in report_ids,
            report_id=report_ids.get(member.id),
            month=str(month)
        )
        for member in members
    ]


# Activity summary

def classify_activity(months_reported: int, reporting_rate: float, avg_hours: float) -> ActivityStatus:
    """Activity status of a publisher over a range; the first matching rule wins."""
    if months_reported == 0:
        return ActivityStatus.INACTIVE
    if reporting_rate < IRREGULAR_RATE_THRESHOLD:
        return ActivityStatus.IRREGULAR
    if avg_hours < LOW_ACTIVITY_HOURS_THRESHOLD:
        return ActivityStatus.LOW_ACTIVITY
    if avg_hours >= EXCELLENT_HOURS_THRESHOLD:
        return ActivityStatus.EXCELLENT
    return ActivityStatus.ACTIVE


NEEDS_SHEPHERDING = {
    ActivityStatus.INACTIVE,
    ActivityStatus.IRREGULAR,
    ActivityStatus.LOW_ACTIVITY
}


def build_member_activity(
    member: Member,
    member_reports: Sequence[FieldServiceReport],
    expected_months: int
) -> MemberActivity:
    total_hours = sum_hours(member_reports)
    months_reported = len(member_reports)
    avg_hours = total_hours / months_reported if months_reported else 0
    reporting_rate = (months_reported / expected_months) * 100 if expected_months else 0
    status = classify_activity(months_reported, reporting_rate, avg_hours)

    return MemberActivity(
        id=member.id,
        name=member.full_name,
        total_hours=total_hours,
        total_bible_studies=sum_bible_studies(member_reports),
        months_reported=months_reported,
        expected_months=expected_months,
        avg_hours=_round_half_up(avg_hours, 1),
        reporting_rate=int(_round_half_up(reporting_rate)),
        status=status.value,
        needs_shepherding=status in NEEDS_SHEPHERDING
    )


def build_monthly_trends(
    reports: Sequence[FieldServiceReport],
    start: MonthKey,
    end: MonthKey
) -> List[MonthlyTrend]:
    trends = []
    for month in month_range(start, end):
        month_reports = [report for report in reports if report.month == str(month)]
        total_hours = sum_hours(month_reports)
        trends.append(MonthlyTrend(
            month=str(month),
            total_hours=total_hours,
            total_reports=len(month_reports),
            avg_hours=_round_half_up(total_hours / len(month_reports), 1) if month_reports else 0,
            bible_studies=sum_bible_studies(month_reports)
        ))
    return trends


def build_activity_summary(
    members: Sequence[Member],
    reports: Sequence[FieldServiceReport],
    start: MonthKey,
    end: MonthKey,
    filters: Dict[str, Any],
    generated_by: str,
    generated_at: Optional[datetime] = None
) -> ActivitySummaryResult:
    """
    Classify publisher activity over a month range.

    Members flagged ``excluded_from_activities`` are left out. Trends cover
    every report in ``reports``, including those of excluded members.
    """
    expected_months = count_months(start, end)
    reports_by_member = group_reports_by_publisher(reports)

    activities = [
        build_member_activity(member, reports_by_member.get(member.id, []), expected_months)
        for member in members
        if not member.excluded_from_activities
    ]

    def with_status(status: ActivityStatus) -> List[MemberActivity]:
        return [activity for activity in activities if activity.status == status.value]

    categories = ActivityCategories(
        excellent=with_status(ActivityStatus.EXCELLENT),
        active=with_status(ActivityStatus.ACTIVE),
        low_activity=with_status(ActivityStatus.LOW_ACTIVITY),
        irregular=with_status(ActivityStatus.IRREGULAR),
        inactive=with_status(ActivityStatus.INACTIVE),
        needs_shepherding=[activity for activity in activities if activity.needs_shepherding]
    )

    total_hours = sum(activity.total_hours for activity in activities)
    summary = ActivityTotals(
        total_members=len(activities),
        excellent_count=len(categories.excellent),
        active_count=len(categories.active),
        low_activity_count=len(categories.low_activity),
        irregular_count=len(categories.irregular),
        inactive_count=len(categories.inactive),
        needs_shepherding_count=len(categories.needs_shepherding),
        total_hours=total_hours,
        total_bible_studies=sum(activity.total_bible_studies for activity in activities),
        avg_hours_per_member=_round_half_up(total_hours / len(activities), 1) if activities else 0
    )

    return ActivitySummaryResult(
        summary=summary,
        categories=categories,
        trends=build_monthly_trends(reports, start, end),
        filters=dict(filters),
        generated_at=generated_at or _now(),
        generated_by=generated_by
    )
