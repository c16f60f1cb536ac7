# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for report endpoints.

Report payloads are serialized with camelCase keys via ``CamelModel``.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime
from .base import CamelModel


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class ErrorResponse(BaseModel):
    """Error response model following RFC 7807."""

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error detail")
    instance: str = Field(..., description="Request instance")
    errors: Optional[List[Dict[str, Any]]] = Field(None, description="Validation errors")


# Member report sheets (S-21 records)

class PrivilegeFlags(CamelModel):
    """Standing privilege flags printed on a member's S-21 record."""

    elder: bool = False
    ministerial_servant: bool = False
    regular_pioneer: bool = False
    auxiliary_pioneer: bool = Field(False, description="Standing auxiliary pioneer privilege")
    special_pioneer: bool = False
    other_sheep: bool = True
    anointed: bool = False
    field_missionary: bool = False


class SheetMember(CamelModel):
    """Identity block of a member report sheet."""

    id: str = Field(..., description="Member ID")
    full_name: str = Field(..., description="Member full name")
    date_of_birth: str = Field(default="", description="ISO date or empty")
    date_of_baptism: str = Field(default="", description="ISO date or empty")
    gender: str = Field(default="")
    role: str = Field(default="publisher")
    group: str = Field(default="Unassigned")
    privileges: PrivilegeFlags = Field(default_factory=PrivilegeFlags)


class SheetReportRow(CamelModel):
    """One month on a member report sheet."""

    month: str
    hours: float = 0
    bible_studies: int = 0
    auxiliary_pioneer: bool = Field(False, description="Reported as auxiliary pioneer this month")
    comments: str = ""


class SheetTotals(CamelModel):
    hours: float = 0
    bible_studies: int = 0


class MemberReportSheet(CamelModel):
    """Member snapshot with its report rows in range."""

    member: SheetMember
    has_auxiliary_pioneer_reports: bool = Field(
        False,
        description="At least one report in range was flagged auxiliary pioneer"
    )
    reports: List[SheetReportRow] = Field(default_factory=list)
    totals: SheetTotals = Field(default_factory=SheetTotals)


# Field service report

class PioneerClassTotals(CamelModel):
    count: int = 0
    total_hours: float = 0
    total_bible_studies: int = 0


class PioneerTotals(CamelModel):
    regular_pioneers: PioneerClassTotals = Field(default_factory=PioneerClassTotals)
    auxiliary_pioneers: PioneerClassTotals = Field(default_factory=PioneerClassTotals)


class ReportSummary(CamelModel):
    """Aggregate figures across the filtered member set."""

    total_members: int = 0
    total_reports: int = 0
    total_hours: float = 0
    total_bible_studies: int = 0
    average_hours: float = 0
    reporting_percentage: float = 0
    pioneer_totals: PioneerTotals = Field(default_factory=PioneerTotals)


class FieldServiceReportResult(CamelModel):
    summary: ReportSummary
    member_reports: List[MemberReportSheet] = Field(default_factory=list)
    filters: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime
    generated_by: str


# Pioneer summary

class MonthBucket(CamelModel):
    """Pioneer figures for one calendar month."""

    month: str
    month_name: str
    regular_pioneers: PioneerClassTotals = Field(default_factory=PioneerClassTotals)
    auxiliary_pioneers: PioneerClassTotals = Field(default_factory=PioneerClassTotals)


class PioneerRangeTotals(CamelModel):
    total_count: int = 0
    average_count: float = 0
    total_hours: float = 0
    total_bible_studies: int = 0


class PioneerSummaryTotals(CamelModel):
    regular_pioneers: PioneerRangeTotals = Field(default_factory=PioneerRangeTotals)
    auxiliary_pioneers: PioneerRangeTotals = Field(default_factory=PioneerRangeTotals)


class PioneerSummaryResult(CamelModel):
    months: List[MonthBucket] = Field(default_factory=list)
    totals: PioneerSummaryTotals = Field(default_factory=PioneerSummaryTotals)
    regular_pioneer_reports: List[MemberReportSheet] = Field(default_factory=list)
    auxiliary_pioneer_reports: List[MemberReportSheet] = Field(default_factory=list)
    filters: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime
    generated_by: str


# Monthly congregation report

class PublisherMonthTotals(CamelModel):
    reports: int = 0
    bible_studies: int = 0


class PioneerMonthTotals(CamelModel):
    reports: int = 0
    hours: float = 0
    bible_studies: int = 0


class MonthlyReportResult(CamelModel):
    month: str
    active_publishers: int = 0
    publishers: PublisherMonthTotals = Field(default_factory=PublisherMonthTotals)
    auxiliary_pioneers: PioneerMonthTotals = Field(default_factory=PioneerMonthTotals)
    regular_pioneers: PioneerMonthTotals = Field(default_factory=PioneerMonthTotals)
    generated_at: datetime
    generated_by: str


class HelpIssues(CamelModel):
    no_report: bool = False
    no_study: bool = False


class MemberNeedingHelp(CamelModel):
    id: str
    full_name: str
    group_name: str = "No Group"
    issues: HelpIssues = Field(default_factory=HelpIssues)


class MemberReportStatus(CamelModel):
    id: str
    full_name: str
    privileges: List[str] = Field(default_factory=list)
    has_reported: bool = False
    report_id: Optional[str] = None
    month: str


# Activity summary

class MemberActivity(CamelModel):
    """Per-member activity figures over a month range."""

    id: str
    name: str
    total_hours: float = 0
    total_bible_studies: int = 0
    months_reported: int = 0
    expected_months: int = 0
    avg_hours: float = 0
    reporting_rate: int = 0
    status: str
    needs_shepherding: bool = False


class ActivityTotals(CamelModel):
    total_members: int = 0
    excellent_count: int = 0
    active_count: int = 0
    low_activity_count: int = 0
    irregular_count: int = 0
    inactive_count: int = 0
    needs_shepherding_count: int = 0
    total_hours: float = 0
    total_bible_studies: int = 0
    avg_hours_per_member: float = 0


class ActivityCategories(CamelModel):
    excellent: List[MemberActivity] = Field(default_factory=list)
    active: List[MemberActivity] = Field(default_factory=list)
    low_activity: List[MemberActivity] = Field(default_factory=list)
    irregular: List[MemberActivity] = Field(default_factory=list)
    inactive: List[MemberActivity] = Field(default_factory=list)
    needs_shepherding: List[MemberActivity] = Field(default_factory=list)


class MonthlyTrend(CamelModel):
    month: str
    total_hours: float = 0
    total_reports: int = 0
    avg_hours: float = 0
    bible_studies: int = 0


class ActivitySummaryResult(CamelModel):
    summary: ActivityTotals = Field(default_factory=ActivityTotals)
    categories: ActivityCategories = Field(default_factory=ActivityCategories)
    trends: List[MonthlyTrend] = Field(default_factory=list)
    filters: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime
    generated_by: str


# Filter options

class NamedOption(CamelModel):
    id: str
    name: str


class FilterOptions(CamelModel):
    roles: List[NamedOption] = Field(default_factory=list)
    groups: List[NamedOption] = Field(default_factory=list)
    privileges: List[NamedOption] = Field(default_factory=list)
    members: List[NamedOption] = Field(default_factory=list)
