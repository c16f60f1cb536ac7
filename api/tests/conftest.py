# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime
from typing import Iterable, Optional, Union
from unittest.mock import MagicMock, patch
from bson import ObjectId

# Set test environment before the app module is imported
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['DOCS_ENABLED'] = 'false'
os.environ['MONGODB_DATABASE'] = 'congregation_test'
os.environ['BASE_URL'] = 'http://localhost:5000'

from domain.privileges import classify_privileges
from models.entities import FieldServiceReport, Member, ReportPublisher


@pytest.fixture
def make_member():
    """Factory for members with classified privileges."""
    def _make(
        full_name: str,
        privileges: Iterable[str] = (),
        group_name: Optional[str] = None,
        role: str = "publisher",
        excluded: bool = False,
        member_id: Optional[str] = None,
        **kwargs
    ) -> Member:
        names = list(privileges)
        return Member(
            id=member_id or str(ObjectId()),
            full_name=full_name,
            role=role,
            privilege_names=names,
            privilege_tags=classify_privileges(names),
            group_name=group_name,
            excluded_from_activities=excluded,
            **kwargs
        )
    return _make


@pytest.fixture
def make_report():
    """Factory for reports with the publisher snapshot attached."""
    def _make(
        member: Union[Member, str],
        month: str,
        hours: float = 0,
        bible_students: int = 0,
        auxiliary_pioneer: bool = False,
        comments: str = ""
    ) -> FieldServiceReport:
        if isinstance(member, Member):
            publisher_id = member.id
            publisher = ReportPublisher(
                id=member.id,
                full_name=member.full_name,
                privilege_names=member.privilege_names,
                privilege_tags=member.privilege_tags
            )
        else:
            publisher_id = member
            publisher = None

        return FieldServiceReport(
            id=str(ObjectId()),
            publisher_id=publisher_id,
            publisher=publisher,
            month=month,
            hours=hours,
            bible_students=bible_students,
            auxiliary_pioneer=auxiliary_pioneer,
            comments=comments
        )
    return _make


@pytest.fixture
def privilege_docs():
    """Privilege documents as stored in MongoDB."""
    return {
        "elder": {"_id": ObjectId(), "name": "Elder"},
        "regular_pioneer": {"_id": ObjectId(), "name": "Regular Pioneer"},
        "anointed": {"_id": ObjectId(), "name": "Anointed"},
        "child": {"_id": ObjectId(), "name": "Child", "excludeFromActivities": True},
    }


@pytest.fixture
def group_doc():
    return {"_id": ObjectId(), "name": "North Group"}


@pytest.fixture
def member_docs(privilege_docs, group_doc):
    """Member documents as stored in MongoDB."""
    return [
        {
            "_id": ObjectId(),
            "fullName": "Anna Baker",
            "dob": datetime(1980, 5, 17),
            "baptizedDate": datetime(1998, 7, 4),
            "gender": "female",
            "role": "publisher",
            "privileges": [privilege_docs["regular_pioneer"]["_id"]],
            "groupId": group_doc["_id"],
        },
        {
            "_id": ObjectId(),
            "fullName": "Carl Dunn",
            "gender": "male",
            "role": "elder",
            "privileges": [privilege_docs["elder"]["_id"], privilege_docs["anointed"]["_id"]],
        },
        {
            "_id": ObjectId(),
            "fullName": "Eli Ford",
            "privileges": [privilege_docs["child"]["_id"]],
            "groupId": group_doc["_id"],
        },
    ]


@pytest.fixture
def mock_mongodb_service():
    """MongoDB service whose collections are independent mocks."""
    service = MagicMock()
    service.members = MagicMock(name="members")
    service.privileges = MagicMock(name="privileges")
    service.groups = MagicMock(name="groups")
    service.roles = MagicMock(name="roles")
    service.reports = MagicMock(name="field_service_reports")
    return service


@pytest.fixture(scope="session")
def flask_app():
    """The application module's Flask app."""
    from app import app
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def mock_report_service(flask_app):
    """Replace the app's report service for endpoint tests."""
    service = MagicMock()
    with patch.object(flask_app, 'report_service', service):
        yield service


@pytest.fixture
def issue_token(flask_app):
    """Issue real tokens signed by the app's auth service."""
    def _issue(permissions=("report:read",), name="Sister Secretary", user_id="user-1"):
        token = flask_app.auth_service.generate_access_token(
            user_id,
            list(permissions),
            name=name,
            congregation_id="congregation-1"
        )
        return token["access_token"]
    return _issue


@pytest.fixture
def auth_headers(issue_token):
    return {"Authorization": f"Bearer {issue_token()}"}
