# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Report generation service.

Fetches members and reports through the directory and report services and
hands them to the aggregation functions in ``domain.reports``. Every report
is built from two independent reads; any failure aborts the whole report.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from domain import reports as aggregation
from domain.months import MonthKey
from middleware.error_handler import ReportGenerationException, ValidationException
from models.requests import (
    ActivitySummaryRequest, FieldServiceReportRequest, PioneerSummaryRequest
)
from models.responses import (
    ActivitySummaryResult, FieldServiceReportResult, FilterOptions,
    MemberNeedingHelp, MemberReportStatus, MonthlyReportResult,
    PioneerSummaryResult
)
from .directory import FilterCatalogService, MemberDirectoryService
from .field_service import FieldServiceReportService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Months counted back from the report month (inclusive) for active publishers
ACTIVE_PUBLISHER_WINDOW_MONTHS = 6


class ReportGeneratorService:
    """Orchestrates report generation."""

    def __init__(
        self,
        directory: MemberDirectoryService,
        field_service: FieldServiceReportService,
        catalog: FilterCatalogService
    ):
        self.directory = directory
        self.field_service = field_service
        self.catalog = catalog

    @contextmanager
    def _generating(self, span_name: str, failure_message: str, attributes: Dict[str, Any]) -> Iterator[Any]:
        with tracer.start_as_current_span(span_name, attributes=attributes) as span:
            try:
                yield span
            except ValidationException:
                raise
            except ValidationError as e:
                # Stored documents failing model validation are data errors, not client errors
                raise self._failure(span, e, span_name, failure_message, attributes) from e
            except ValueError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise ValidationException(str(e)) from e
            except Exception as e:
                raise self._failure(span, e, span_name, failure_message, attributes) from e

    @staticmethod
    def _failure(
        span: Any,
        error: Exception,
        span_name: str,
        failure_message: str,
        attributes: Dict[str, Any]
    ) -> ReportGenerationException:
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
        logger.error(
            failure_message,
            extra={**attributes, "error": str(error)},
            exc_info=error
        )
        return ReportGenerationException(failure_message, span_name)

    def generate_field_service_report(
        self,
        request: FieldServiceReportRequest,
        generated_by: str
    ) -> FieldServiceReportResult:
        """Member report sheets and summary for the filtered member set."""
        with self._generating(
            "reports.field_service.generate",
            "Failed to generate field service report",
            {
                "report.start_month": request.start_month,
                "report.end_month": request.end_month,
                "filter.type": str(request.filter_type)
            }
        ) as span:
            members = self.directory.find_by_filter(request.filter_type, request.filter_value)
            reports = self.field_service.find_in_range(
                [member.id for member in members],
                request.start,
                request.end
            )

            result = aggregation.build_field_service_report(
                members,
                reports,
                request.to_json_dict(),
                generated_by
            )

            span.set_attributes({
                "report.member_count": len(members),
                "report.report_count": len(reports)
            })
            logger.info(
                "Field service report generated",
                extra={
                    "generated_by": generated_by,
                    "member_count": len(members),
                    "report_count": len(reports)
                }
            )
            return result

    def generate_pioneer_summary_report(
        self,
        request: PioneerSummaryRequest,
        generated_by: str
    ) -> PioneerSummaryResult:
        """Regular and auxiliary pioneer figures month by month."""
        with self._generating(
            "reports.pioneer_summary.generate",
            "Failed to generate pioneer summary report",
            {
                "report.start_month": request.start_month,
                "report.end_month": request.end_month
            }
        ) as span:
            regular_pioneers = self.directory.find_regular_pioneers()
            reports = self.field_service.find_all_in_range(request.start, request.end)

            auxiliary_ids = list(aggregation.discover_auxiliary_pioneers(reports))
            members_by_id = self.directory.find_by_ids(auxiliary_ids)

            result = aggregation.build_pioneer_summary(
                regular_pioneers,
                reports,
                request.start,
                request.end,
                request.to_json_dict(),
                generated_by,
                members_by_id=members_by_id
            )

            span.set_attributes({
                "report.regular_pioneer_count": len(regular_pioneers),
                "report.auxiliary_pioneer_count": len(auxiliary_ids),
                "report.report_count": len(reports)
            })
            logger.info(
                "Pioneer summary report generated",
                extra={
                    "generated_by": generated_by,
                    "regular_pioneer_count": len(regular_pioneers),
                    "auxiliary_pioneer_count": len(auxiliary_ids)
                }
            )
            return result

    def generate_monthly_report(self, month: MonthKey, generated_by: str) -> MonthlyReportResult:
        """Congregation totals for one month by publisher class."""
        with self._generating(
            "reports.monthly.generate",
            "Failed to generate monthly report",
            {"report.month": str(month)}
        ):
            window_start = month.add_months(1 - ACTIVE_PUBLISHER_WINDOW_MONTHS)
            active_publishers = self.field_service.distinct_publishers_in_range(window_start, month)
            month_reports = self.field_service.find_for_month(month)
            regular_pioneer_ids = {member.id for member in self.directory.find_regular_pioneers()}

            return aggregation.build_monthly_report(
                month,
                month_reports,
                len(active_publishers),
                regular_pioneer_ids,
                generated_by
            )

    def find_members_needing_help(self, month: MonthKey) -> List[MemberNeedingHelp]:
        """Members without a report or without a Bible study in the month."""
        with self._generating(
            "reports.members_needing_help.find",
            "Failed to find members needing help",
            {"report.month": str(month)}
        ) as span:
            members = self.directory.find_all()
            month_reports = self.field_service.find_for_month(month)

            needing_help = aggregation.find_members_needing_help(members, month_reports)
            span.set_attribute("report.member_count", len(needing_help))
            return needing_help

    def generate_activity_summary(
        self,
        request: ActivitySummaryRequest,
        generated_by: str
    ) -> ActivitySummaryResult:
        """Activity classification of publishers over a month range."""
        with self._generating(
            "reports.activity_summary.generate",
            "Failed to generate field service summary",
            {
                "report.start_month": request.start_month,
                "report.end_month": request.end_month
            }
        ):
            members = self.directory.find_all(group_id=request.group_id, role=request.role)
            reports = self.field_service.find_all_in_range(request.start, request.end)

            return aggregation.build_activity_summary(
                members,
                reports,
                request.start,
                request.end,
                request.to_json_dict(),
                generated_by
            )

    def members_report_status(
        self,
        month: MonthKey,
        group_id: Optional[str] = None
    ) -> List[MemberReportStatus]:
        """Whether each member has reported for the month."""
        with self._generating(
            "reports.status.find",
            "Failed to fetch member report status",
            {"report.month": str(month)}
        ):
            members = self.directory.find_all(group_id=group_id)
            month_reports = self.field_service.find_for_month(month)
            return aggregation.build_report_status(members, month_reports, month)

    def get_filter_options(self) -> FilterOptions:
        with self._generating(
            "reports.filter_options.get",
            "Failed to load filter options",
            {}
        ):
            return self.catalog.get_filter_options()
