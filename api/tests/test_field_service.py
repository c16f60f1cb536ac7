# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for field service report range queries.
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from domain.months import MonthKey
from models.entities import ReportPublisher
from services.field_service import FieldServiceReportService, month_range_query


@pytest.fixture
def directory():
    directory = MagicMock()
    directory.resolve_publishers.return_value = {}
    return directory


@pytest.fixture
def service(mock_mongodb_service, directory):
    return FieldServiceReportService(mock_mongodb_service, directory)


class TestMonthRangeQuery:
    """Test month bound queries."""

    def test_inclusive_bounds(self):
        query = month_range_query(MonthKey(2024, 11), MonthKey(2025, 2))

        assert query == {"month": {"$gte": "2024-11", "$lte": "2025-02"}}


class TestFieldServiceReportService:
    """Test report fetching."""

    def test_find_in_range_without_members(self, service, mock_mongodb_service):
        """No valid member IDs means no query at all."""
        assert service.find_in_range(["bad-id"], MonthKey(2024, 1), MonthKey(2024, 2)) == []
        mock_mongodb_service.reports.find.assert_not_called()

    def test_find_in_range_query(self, service, mock_mongodb_service):
        member_id = ObjectId()
        mock_mongodb_service.reports.find.return_value = []

        service.find_in_range([str(member_id)], MonthKey(2024, 1), MonthKey(2024, 2))

        mock_mongodb_service.reports.find.assert_called_once_with({
            "month": {"$gte": "2024-01", "$lte": "2024-02"},
            "publisher": {"$in": [member_id]}
        })

    def test_reports_sorted_by_month_with_publishers(self, service, mock_mongodb_service, directory):
        publisher_id = ObjectId()
        documents = [
            {"_id": ObjectId(), "publisher": publisher_id, "month": "2024-02", "hours": 4},
            {"_id": ObjectId(), "publisher": publisher_id, "month": "2024-01", "hours": 6},
        ]
        mock_mongodb_service.reports.find.return_value = documents
        directory.resolve_publishers.return_value = {
            str(publisher_id): ReportPublisher(id=str(publisher_id), full_name="Anna Baker")
        }

        reports = service.find_all_in_range(MonthKey(2024, 1), MonthKey(2024, 2))

        assert [r.month for r in reports] == ["2024-01", "2024-02"]
        assert reports[0].hours == 6
        assert reports[0].publisher.full_name == "Anna Baker"
        assert reports[0].publisher_id == str(publisher_id)

    def test_missing_publisher_keeps_report(self, service, mock_mongodb_service):
        mock_mongodb_service.reports.find.return_value = [
            {"_id": ObjectId(), "publisher": ObjectId(), "month": "2024-01"}
        ]

        reports = service.find_for_month(MonthKey(2024, 1))

        assert len(reports) == 1
        assert reports[0].publisher is None

    def test_distinct_publishers_in_range(self, service, mock_mongodb_service):
        publisher_id = ObjectId()
        mock_mongodb_service.reports.distinct.return_value = [publisher_id]

        result = service.distinct_publishers_in_range(MonthKey(2023, 12), MonthKey(2024, 5))

        assert result == [str(publisher_id)]
        mock_mongodb_service.reports.distinct.assert_called_once_with(
            "publisher", {"month": {"$gte": "2023-12", "$lte": "2024-05"}}
        )
