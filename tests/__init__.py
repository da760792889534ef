# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the MedApps Marketplace API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_developer_service.py / test_catalog_service.py: Account and catalog services
# - test_submission_service.py: Submission, listing fee and moderation lifecycle
# - test_paystack_client.py: Paystack adapter against a mock transport
# - test_security.py: Password hashing and session tokens
# - test_api.py: Integration tests for API endpoints
#
# Run tests with: pytest
# =============================================================================
