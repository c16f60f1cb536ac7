# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Adds ``_links`` to report payloads and builds RFC 7807 problem documents.
"""

from typing import Dict, List, Any, Optional
from urllib.parse import urljoin, urlencode

from models.responses import HalLink

PROBLEM_TYPE_BASE = "https://api.congregation-reports.org/problems/"
REPORTS_PATH = "/api/reports"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False,
        query_params: Optional[Dict[str, Any]] = None
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url + '/', path.lstrip('/'))

        params = {key: value for key, value in (query_params or {}).items() if value is not None}
        if params:
            href = f"{href}?{urlencode(params)}"

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated or None
        )

    def build_self_link(
        self,
        resource_path: str,
        method: str = "GET",
        query_params: Optional[Dict[str, Any]] = None
    ) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, method=method, title="Self", query_params=query_params)


class HalResponseBuilder:
    """Builds report responses and problem documents."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)

    def build_resource_response(
        self,
        data: Dict[str, Any],
        resource_path: str
    ) -> Dict[str, Any]:
        """Attach a self link to a resource."""
        response = dict(data)
        response['_links'] = {
            'self': self.link_builder.build_self_link(resource_path).model_dump(exclude_none=True)
        }
        return response

    def build_report_response(
        self,
        data: Dict[str, Any],
        report_path: str,
        method: str = "GET",
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Attach self and filter-options links to a serialized report."""
        links = {
            'self': self.link_builder.build_self_link(report_path, method, query_params),
            'filter-options': self.link_builder.build_link(
                f"{REPORTS_PATH}/filter-options",
                title="Report filter options"
            )
        }

        response = dict(data)
        response['_links'] = {
            rel: link.model_dump(exclude_none=True) for rel, link in links.items()
        }
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        collection_path: str,
        embedded_name: str = "items",
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build an unpaginated HAL collection response."""
        self_link = self.link_builder.build_self_link(collection_path, query_params=query_params)
        return {
            'total': len(items),
            '_links': {'self': self_link.model_dump(exclude_none=True)},
            '_embedded': {embedded_name: items}
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_TYPE_BASE}{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }

        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )

        error_response['_links'] = {
            rel: link.model_dump(exclude_none=True) for rel, link in links.items()
        }
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_report(
        self,
        report: Dict[str, Any],
        report_name: str,
        method: str = "GET",
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format a serialized report with HAL links."""
        return self.builder.build_report_response(
            report,
            f"{REPORTS_PATH}/{report_name}",
            method,
            query_params
        )

    def format_report_collection(
        self,
        items: List[Dict[str, Any]],
        report_name: str,
        embedded_name: str,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format a list-shaped report as a HAL collection."""
        return self.builder.build_collection_response(
            items,
            f"{REPORTS_PATH}/{report_name}",
            embedded_name,
            query_params
        )

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_authorization_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_report_generation_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a failed report generation response."""
        return self.builder.build_error_response(
            "report-generation-failed",
            "Report Generation Failed",
            500,
            detail,
            instance
        )

    def format_server_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )


def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
