"""
Common test constants shared across all test files.

Centralizing these values helps reduce SonarQube security hotspots
while maintaining consistent test data across the test suite.
"""

# Test user credentials
TEST_PASSWORD = (
    "testpass123"  # noqa: S105  # nosec B105 - Test password, not a security issue
)

# Test dates and timestamps shared by profile and activity tests
TEST_BIRTHDATE = "2025-01-15"
TEST_TIMESTAMP = "2025-02-17T10:00:00Z"
TEST_TIMESTAMP_LATER = "2025-02-17T11:30:00Z"

# Test RevenueCat customer id
TEST_APP_USER_ID = "$RCAnonymousID:abc123"
