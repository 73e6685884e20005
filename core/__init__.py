# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the domain logic behind the API:
# - models/: Pydantic schemas and enums for each table
# - services/: Content, CRM, communications and integration services
#
# Services raise app.exceptions errors and never build HTTP responses,
# so routers, Celery tasks and cron endpoints share them unchanged.
# =============================================================================
