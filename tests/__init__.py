# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Novique API:
# - test_roles.py / test_auth_session.py / test_api_keys.py: Authorization
# - test_roi.py: ROI calculator engine
# - test_*_service.py: Service logic against an in-memory Supabase double
# - test_twilio_webhooks.py / test_jarvis.py / test_cron.py: HTTP surfaces
#
# Run tests with: pytest
# =============================================================================
