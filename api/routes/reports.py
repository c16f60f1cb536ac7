# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Field service report endpoints.

All endpoints require a bearer token carrying the ``report:read``
permission. Failures inside report generation surface as
``ReportGenerationException`` and are rendered by the registered error
handlers.
"""

from flask import jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from models.entities import UserContext
from models.requests import (
    ActivitySummaryRequest,
    FieldServiceReportRequest,
    MonthQuery,
    PioneerSummaryRequest
)
from middleware.auth import require_jwt, require_permission, REPORT_READ_PERMISSION
from middleware.validation import validate_json_body, validate_query_params

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

reports_tag = Tag(name="Reports", description="Field service report generation")
reports_bp = APIBlueprint(
    'reports',
    __name__,
    url_prefix='/api/reports',
    abp_tags=[reports_tag]
)


def _span_attributes(user_context: UserContext, operation: str, **attributes):
    return {
        "operation": operation,
        "user.id": user_context.user_id,
        **{key: value for key, value in attributes.items() if value is not None}
    }


@reports_bp.post('/field-service')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_json_body(FieldServiceReportRequest)
def generate_field_service_report(user_context: UserContext, payload: FieldServiceReportRequest):
    """
    Generate the field service report.

    Returns a summary plus one S-21 report sheet per member selected by the
    filter, covering the requested month range.
    """
    with tracer.start_as_current_span(
        "reports.field_service",
        attributes=_span_attributes(
            user_context,
            "generate_field_service_report",
            **{"filter.type": str(payload.filter_type)}
        )
    ) as span:
        result = current_app.report_service.generate_field_service_report(
            payload,
            user_context.display_name
        )

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report(
            result.to_json_dict(),
            "field-service",
            method="POST"
        )), 200


@reports_bp.post('/pioneer-summary')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_json_body(PioneerSummaryRequest)
def generate_pioneer_summary(user_context: UserContext, payload: PioneerSummaryRequest):
    """
    Generate the pioneer summary report.

    Regular and auxiliary pioneer counts, hours and Bible studies per month,
    range totals and report sheets for every pioneer.
    """
    with tracer.start_as_current_span(
        "reports.pioneer_summary",
        attributes=_span_attributes(user_context, "generate_pioneer_summary")
    ) as span:
        result = current_app.report_service.generate_pioneer_summary_report(
            payload,
            user_context.display_name
        )

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report(
            result.to_json_dict(),
            "pioneer-summary",
            method="POST"
        )), 200


@reports_bp.get('/monthly')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_query_params(MonthQuery)
def get_monthly_report(user_context: UserContext, params: MonthQuery):
    """Congregation totals for one month by publisher class."""
    with tracer.start_as_current_span(
        "reports.monthly",
        attributes=_span_attributes(user_context, "get_monthly_report", **{"report.month": params.month})
    ) as span:
        result = current_app.report_service.generate_monthly_report(
            params.month_key,
            user_context.display_name
        )

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report(
            result.to_json_dict(),
            "monthly",
            query_params={"month": params.month}
        )), 200


@reports_bp.get('/members-needing-help')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_query_params(MonthQuery)
def get_members_needing_help(user_context: UserContext, params: MonthQuery):
    """Members with no report or no Bible study in the month."""
    with tracer.start_as_current_span(
        "reports.members_needing_help",
        attributes=_span_attributes(
            user_context,
            "get_members_needing_help",
            **{"report.month": params.month}
        )
    ) as span:
        members = current_app.report_service.find_members_needing_help(params.month_key)

        span.set_attribute("report.member_count", len(members))
        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report_collection(
            [member.to_json_dict() for member in members],
            "members-needing-help",
            "members",
            query_params={"month": params.month}
        )), 200


@reports_bp.post('/activity-summary')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_json_body(ActivitySummaryRequest)
def generate_activity_summary(user_context: UserContext, payload: ActivitySummaryRequest):
    """Publisher activity classification over a month range."""
    with tracer.start_as_current_span(
        "reports.activity_summary",
        attributes=_span_attributes(user_context, "generate_activity_summary")
    ) as span:
        result = current_app.report_service.generate_activity_summary(
            payload,
            user_context.display_name
        )

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report(
            result.to_json_dict(),
            "activity-summary",
            method="POST"
        )), 200


@reports_bp.get('/status')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
@validate_query_params(MonthQuery)
def get_report_status(user_context: UserContext, params: MonthQuery):
    """Whether each member has submitted a report for the month."""
    with tracer.start_as_current_span(
        "reports.status",
        attributes=_span_attributes(
            user_context,
            "get_report_status",
            **{"report.month": params.month, "filter.group_id": params.group_id}
        )
    ) as span:
        statuses = current_app.report_service.members_report_status(
            params.month_key,
            group_id=params.group_id
        )

        span.set_attribute("report.member_count", len(statuses))
        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report_collection(
            [status.to_json_dict() for status in statuses],
            "status",
            "members",
            query_params={"month": params.month, "groupId": params.group_id}
        )), 200


@reports_bp.get('/filter-options')
@require_jwt
@require_permission(REPORT_READ_PERMISSION)
def get_filter_options(user_context: UserContext):
    """Roles, groups, privileges and members selectable as report filters."""
    with tracer.start_as_current_span(
        "reports.filter_options",
        attributes=_span_attributes(user_context, "get_filter_options")
    ) as span:
        options = current_app.report_service.get_filter_options()

        span.set_status(Status(StatusCode.OK))
        return jsonify(current_app.hal_formatter.format_report(
            options.to_json_dict(),
            "filter-options"
        )), 200
