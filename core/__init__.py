# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the platform's business logic:
# - models/: Pydantic schemas for request/response validation
# - services/: One service class per area (users, revenue, media, ...)
#
# Routes in app/ and tasks in workers/ call into services; services never
# import routers or tasks.
# =============================================================================
