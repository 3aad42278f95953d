import pytest

from tests.helpers.synthetic_data import write_trace_file


def pytest_collection_modifyitems(items):
    """Apply integration marker to all tests in this directory."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def trace_dir(tmp_path):
    """Directory that stands in for the server's log directory."""
    log_dir = tmp_path / "log"
    log_dir.mkdir()
    return log_dir


@pytest.fixture
def trace_writer(trace_dir):
    """Write a rotated trace file into trace_dir by rollover number."""

    def _write(rollover: int, events, **kwargs):
        path = trace_dir / f"system_health_0_{rollover:018d}.xml"
        return write_trace_file(path, events, **kwargs)

    return _write
