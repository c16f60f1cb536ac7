# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the congregation reports service.
"""

# Base models
from .base import BaseDocument, CamelModel

# Enumerations
from .enums import (
    FilterType,
    PrivilegeTag,
    ActivityStatus
)

# Core entities
from .entities import (
    Privilege,
    Group,
    Member,
    ReportPublisher,
    FieldServiceReport,
    UserContext
)

# Request models
from .requests import (
    MonthRangeRequest,
    FieldServiceReportRequest,
    PioneerSummaryRequest,
    ActivitySummaryRequest,
    MonthQuery
)

# Response models
from .responses import (
    HalLink,
    ErrorResponse,
    PrivilegeFlags,
    SheetMember,
    SheetReportRow,
    SheetTotals,
    MemberReportSheet,
    PioneerClassTotals,
    PioneerTotals,
    ReportSummary,
    FieldServiceReportResult,
    MonthBucket,
    PioneerRangeTotals,
    PioneerSummaryTotals,
    PioneerSummaryResult,
    PublisherMonthTotals,
    PioneerMonthTotals,
    MonthlyReportResult,
    HelpIssues,
    MemberNeedingHelp,
    MemberReportStatus,
    MemberActivity,
    ActivityTotals,
    ActivityCategories,
    MonthlyTrend,
    ActivitySummaryResult,
    NamedOption,
    FilterOptions
)

__all__ = [
    # Base models
    "BaseDocument",
    "CamelModel",

    # Enumerations
    "FilterType",
    "PrivilegeTag",
    "ActivityStatus",

    # Core entities
    "Privilege",
    "Group",
    "Member",
    "ReportPublisher",
    "FieldServiceReport",
    "UserContext",

    # Request models
    "MonthRangeRequest",
    "FieldServiceReportRequest",
    "PioneerSummaryRequest",
    "ActivitySummaryRequest",
    "MonthQuery",

    # Response models
    "HalLink",
    "ErrorResponse",
    "PrivilegeFlags",
    "SheetMember",
    "SheetReportRow",
    "SheetTotals",
    "MemberReportSheet",
    "PioneerClassTotals",
    "PioneerTotals",
    "ReportSummary",
    "FieldServiceReportResult",
    "MonthBucket",
    "PioneerRangeTotals",
    "PioneerSummaryTotals",
    "PioneerSummaryResult",
    "PublisherMonthTotals",
    "PioneerMonthTotals",
    "MonthlyReportResult",
    "HelpIssues",
    "MemberNeedingHelp",
    "MemberReportStatus",
    "MemberActivity",
    "ActivityTotals",
    "ActivityCategories",
    "MonthlyTrend",
    "ActivitySummaryResult",
    "NamedOption",
    "FilterOptions"
]
