"""
Pytest configuration for Django tests.

Settings come from django_project.test_settings (see pyproject.toml).
"""


def pytest_configure(config):
    """Register the markers applied below."""
    config.addinivalue_line(
        "markers", "provider_http: talks to a faked third-party HTTP API"
    )
    config.addinivalue_line(
        "markers", "transactional: relies on database transaction rollback"
    )


def pytest_collection_modifyitems(config, items):
    """Tag tests so provider and rollback suites can be run on their own."""
    provider_tests = [
        "tests_revenuecat",  # RevenueCat client
        "tests_backends",  # Resend email backend
        "RedeemVoucher",  # Redemption goes through RevenueCat
    ]
    transactional_tests = [
        "tests_sync",
        "BabyProfileDelete",
    ]

    for item in items:
        test_nodeid = item.nodeid
        if any(pattern in test_nodeid for pattern in provider_tests):
            item.add_marker("provider_http")
        if any(pattern in test_nodeid for pattern in transactional_tests):
            item.add_marker("transactional")
