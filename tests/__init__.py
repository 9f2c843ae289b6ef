# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the MusicMethod API:
# - test_models.py: Pydantic model validation
# - test_*_service / feature modules: service behaviour with Supabase,
#   Stripe, boto3 and httpx mocked
# - test_api.py: Route tests through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
