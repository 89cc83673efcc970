import pytest
import sys
from pathlib import Path

# Ensure src/ is in the python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from applife.core.context import LifecycleContext, reset_default_context


class RecordingSink:
    """Collects lifecycle notices instead of printing them."""

    def __init__(self):
        self.records = []

    def info(self, message):
        self.records.append(("info", message))

    def warning(self, message):
        self.records.append(("warning", message))

    def error(self, message):
        self.records.append(("error", message))

    def messages(self, severity):
        return [message for level, message in self.records if level == severity]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def context(sink):
    """An isolated orchestration context reporting into a RecordingSink."""
    return LifecycleContext(sink=sink)


@pytest.fixture(autouse=True)
def default_context():
    """
    Give every test a fresh process-wide context so decorator declarations
    never leak between tests.
    """
    ctx = reset_default_context(LifecycleContext(sink=RecordingSink()))
    yield ctx
    reset_default_context(LifecycleContext(sink=RecordingSink()))


@pytest.fixture
def root_dir(tmp_path):
    """
    Returns a temporary directory to act as the project root for CLI tests.
    """
    return tmp_path
