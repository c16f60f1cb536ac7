# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and user context extraction.

This module provides Flask decorators that validate bearer tokens, build the
caller's user context and enforce permissions on report endpoints.
"""

from functools import wraps
from flask import request, jsonify, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
import logging

from models.entities import UserContext
from services.auth import AuthService, TokenValidationError
from services.hal import HalFormatter

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

REPORT_READ_PERMISSION = "report:read"


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and user context building for
    protected endpoints.
    """

    def __init__(self, auth_service: AuthService, hal_formatter: HalFormatter):
        """
        Initialize the authentication middleware.

        Args:
            auth_service: JWT authentication service
            hal_formatter: Formatter for problem responses
        """
        self.auth_service = auth_service
        self.hal_formatter = hal_formatter

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from request headers.

        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '').strip()

        if not auth_header:
            return None

        if auth_header.startswith('Bearer '):
            return auth_header[7:].strip() or None

        return auth_header

    def build_user_context(self, token_payload: Dict[str, Any], request_info: Dict[str, Any]) -> UserContext:
        """
        Build user context from validated token payload and request information.

        Args:
            token_payload: Decoded JWT payload
            request_info: Request metadata (IP, user agent)

        Returns:
            UserContext object for request processing
        """
        return UserContext(
            user_id=token_payload["sub"],
            congregation_id=token_payload.get("congregation_id"),
            email=token_payload.get("email"),
            name=token_payload.get("name"),
            permissions=token_payload.get("permissions") or [],
            token_payload=token_payload,
            ip_address=request_info.get("ip_address"),
            user_agent=request_info.get("user_agent")
        )

    def get_request_info(self) -> Dict[str, Any]:
        """Extract request metadata for user context."""
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', ''),
            "request_id": request.headers.get('X-Request-ID')
        }

    def authenticate(self) -> UserContext:
        """
        Validate the request's bearer token and return the caller's context.

        Raises:
            TokenValidationError: If the token is missing or invalid
        """
        token = self.extract_token_from_request()
        if not token:
            raise TokenValidationError("Missing authorization token")

        token_payload = self.auth_service.validate_token(token, "access")
        if not token_payload.get("sub"):
            raise TokenValidationError("Token has no subject")

        return self.build_user_context(token_payload, self.get_request_info())

    def unauthorized(self, detail: str):
        return jsonify(self.hal_formatter.format_authentication_error(detail, request.path)), 401

    def forbidden(self, detail: str):
        return jsonify(self.hal_formatter.format_authorization_error(detail, request.path)), 403


def require_jwt(f: Callable) -> Callable:
    """Require a valid bearer token; the user context is passed as first argument."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_middleware: AuthMiddleware = current_app.auth_middleware

        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            span.set_attribute("auth.operation", "validate_request")

            try:
                user_context = auth_middleware.authenticate()
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}")
                return auth_middleware.unauthorized(str(e))

            g.user_context = user_context

            span.set_attributes({
                "auth.result": "success",
                "user.id": user_context.user_id
            })
            logger.debug(
                "Authentication successful",
                extra={
                    "user_id": user_context.user_id,
                    "congregation_id": user_context.congregation_id,
                    "ip_address": user_context.ip_address
                }
            )

        return f(user_context, *args, **kwargs)

    return decorated_function


def require_permission(permission: str) -> Callable:
    """
    Decorator to require a specific permission; apply below ``require_jwt``.

    Args:
        permission: Required permission string

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(user_context: UserContext, *args, **kwargs):
            with tracer.start_as_current_span("auth.middleware.check_permission") as span:
                span.set_attributes({
                    "auth.operation": "check_permission",
                    "auth.required_permission": permission,
                    "user.id": user_context.user_id
                })

                if not user_context.has_permission(permission):
                    span.set_attribute("auth.permission_result", "denied")
                    logger.warning(
                        f"Authorization failed: missing permission '{permission}'",
                        extra={
                            "user_id": user_context.user_id,
                            "required_permission": permission,
                            "user_permissions": user_context.permissions
                        }
                    )
                    return current_app.auth_middleware.forbidden(
                        f"Missing required permission: {permission}"
                    )

                span.set_attribute("auth.permission_result", "granted")

            return f(user_context, *args, **kwargs)

        return decorated_function
    return decorator
