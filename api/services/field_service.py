# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Field service report range queries.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from opentelemetry import trace

from domain.months import MonthKey
from models.entities import FieldServiceReport, ReportPublisher
from .directory import MemberDirectoryService
from .mongodb import MongoDBService, to_object_ids

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def month_range_query(start: MonthKey, end: MonthKey) -> Dict[str, Any]:
    """Inclusive month bounds; stored keys are zero-padded so string order is calendar order."""
    return {"month": {"$gte": str(start), "$lte": str(end)}}


class FieldServiceReportService:
    """Fetch monthly field service reports by month range."""

    def __init__(self, mongodb_service: MongoDBService, directory: MemberDirectoryService):
        self.mongodb_service = mongodb_service
        self.directory = directory

    def find_in_range(
        self,
        member_ids: Iterable[str],
        start: MonthKey,
        end: MonthKey
    ) -> List[FieldServiceReport]:
        """Reports of the given members with month in [start, end]."""
        object_ids = to_object_ids(member_ids)
        if not object_ids:
            return []

        query = month_range_query(start, end)
        query["publisher"] = {"$in": object_ids}

        with tracer.start_as_current_span(
            "db.field_service_reports.find_in_range",
            attributes={
                "report.start_month": str(start),
                "report.end_month": str(end),
                "report.member_count": len(object_ids)
            }
        ) as span:
            reports = self._find(query)
            span.set_attribute("db.returned_count", len(reports))
            return reports

    def find_all_in_range(self, start: MonthKey, end: MonthKey) -> List[FieldServiceReport]:
        """Every report with month in [start, end], all publishers."""
        with tracer.start_as_current_span(
            "db.field_service_reports.find_all_in_range",
            attributes={
                "report.start_month": str(start),
                "report.end_month": str(end)
            }
        ) as span:
            reports = self._find(month_range_query(start, end))
            span.set_attribute("db.returned_count", len(reports))
            return reports

    def find_for_month(self, month: MonthKey) -> List[FieldServiceReport]:
        return self.find_all_in_range(month, month)

    def distinct_publishers_in_range(self, start: MonthKey, end: MonthKey) -> List[str]:
        """IDs of publishers with at least one report in [start, end]."""
        publisher_ids = self.mongodb_service.reports.distinct("publisher", month_range_query(start, end))
        return [str(publisher_id) for publisher_id in publisher_ids]

    def _find(self, query: Mapping[str, Any]) -> List[FieldServiceReport]:
        # Natural order, then a stable sort by month keeps insertion order within a month
        documents = sorted(
            self.mongodb_service.reports.find(dict(query)),
            key=lambda document: document["month"]
        )
        publishers = self.directory.resolve_publishers(doc["publisher"] for doc in documents)
        return [self._build_report(document, publishers) for document in documents]

    @staticmethod
    def _build_report(
        document: Mapping[str, Any],
        publishers: Mapping[str, ReportPublisher]
    ) -> FieldServiceReport:
        publisher: Optional[ReportPublisher] = publishers.get(str(document["publisher"]))
        if publisher is None:
            logger.warning(
                "Report publisher not found",
                extra={"report_id": str(document.get("_id")), "publisher_id": str(document["publisher"])}
            )
        return FieldServiceReport.from_document(document, publisher=publisher)
