"""
Congregation Reports API - Flask Application Entry Point

This module initializes the Flask application with OpenAPI 3.0 support,
configures middleware and wires the MongoDB-backed report services.
"""

import os
from datetime import datetime, timezone
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag
from observability.config import setup_observability
from observability.middleware import add_observability_middleware

from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from middleware.auth import AuthMiddleware
from services.hal import create_hal_formatter
from services.mongodb import MongoDBService
from services.auth import AuthService
from services.directory import MemberDirectoryService, FilterCatalogService
from services.field_service import FieldServiceReportService
from services.reports import ReportGeneratorService
from services.health import HealthCheckService, SERVICE_NAME

# Initialize observability first
otel_enabled = setup_observability()

info = Info(
    title="Congregation Reports API",
    version=os.getenv('SERVICE_VERSION', '1.0.0'),
    description="Field service report aggregation for congregation records"
)

tags = [
    Tag(name="Reports", description="Field service report generation"),
    Tag(name="Health", description="System health and status")
]

app = OpenAPI(__name__, info=info, doc_ui=os.getenv('DOCS_ENABLED', 'true').lower() == 'true')

add_observability_middleware(app, instrument=otel_enabled)

# Environment configuration
app.config['ENVIRONMENT'] = os.getenv('ENVIRONMENT', 'development')
app.config['DEBUG'] = app.config['ENVIRONMENT'] == 'development'
app.config['DOCS_ENABLED'] = os.getenv('DOCS_ENABLED', 'true').lower() == 'true'
app.config['OTEL_ENABLED'] = otel_enabled
app.config['SERVICE_VERSION'] = os.getenv('SERVICE_VERSION', '1.0.0')

# Database configuration
app.config['MONGODB_URI'] = os.getenv('MONGODB_URI', 'mongodb://localhost:27017/congregation_dev')
app.config['MONGODB_DATABASE'] = os.getenv('MONGODB_DATABASE', 'congregation_dev')

# API configuration
app.config['BASE_URL'] = os.getenv('BASE_URL', 'http://localhost:5000')

# Initialize services; MongoDB connects lazily on first query
mongodb_service = MongoDBService(app.config['MONGODB_URI'], app.config['MONGODB_DATABASE'])
auth_service = AuthService()
member_directory = MemberDirectoryService(mongodb_service)
field_service_reports = FieldServiceReportService(mongodb_service, member_directory)
filter_catalog = FilterCatalogService(mongodb_service)
report_service = ReportGeneratorService(member_directory, field_service_reports, filter_catalog)
health_service = HealthCheckService(mongodb_service, app.config['SERVICE_VERSION'])

# Initialize middleware
hal_formatter = create_hal_formatter(app.config['BASE_URL'])
auth_middleware = AuthMiddleware(auth_service, hal_formatter)
error_handler = ErrorHandlerMiddleware(app, hal_formatter)
register_custom_error_handlers(app, hal_formatter)

# Make services available to routes
app.mongodb_service = mongodb_service
app.auth_service = auth_service
app.report_service = report_service
app.health_service = health_service
app.hal_formatter = hal_formatter
app.auth_middleware = auth_middleware

# Register routes
from routes.reports import reports_bp

app.register_api(reports_bp)


@app.get('/api/healthz', tags=[tags[1]])
def health_check():
    """Service health with MongoDB connectivity."""
    try:
        health_data = health_service.get_health()
    except Exception as e:
        app.logger.error(f"Health check failed: {e}", exc_info=True)
        health_data = {
            "status": "unhealthy",
            "service": SERVICE_NAME,
            "version": app.config['SERVICE_VERSION'],
            "environment": app.config['ENVIRONMENT'],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error": f"Health check service failed: {str(e)}"
        }

    status_code = 200 if health_data["status"] == "healthy" else 503
    health_response = hal_formatter.builder.build_resource_response(health_data, "/api/healthz")
    return jsonify(health_response), status_code


if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=app.config['DEBUG']
    )
