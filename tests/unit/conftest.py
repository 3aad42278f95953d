import pytest

BUSINESS_LOGIC_MODULES = {"test_extractor", "test_correlator"}


def pytest_collection_modifyitems(items):
    """Apply unit marker to all tests in this directory."""
    for item in items:
        if "/unit/" not in str(item.fspath):
            continue
        item.add_marker(pytest.mark.unit)
        if item.path.stem in BUSINESS_LOGIC_MODULES:
            item.add_marker(pytest.mark.business_logic)
