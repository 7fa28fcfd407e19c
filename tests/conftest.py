"""Shared test fixtures for C Function Counter tests."""

import pytest

from c_function_counter.config import CounterConfig
from c_function_counter.table import FileCountTable
from c_function_counter.tracker import FileTracker


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


SIMPLE_C = """\
#include <stdio.h>

/* Adds two numbers. */
int add(int a, int b) {
    return a + b;
}

static const char *greeting(void)
{
    return "hello(){";
}

int main(int argc, char **argv) {
    printf("%d\\n", add(1, 2));
    return 0;
}
"""


@pytest.fixture
def simple_c_source():
    """C source with three simple definitions."""
    return SIMPLE_C


@pytest.fixture
def workspace(tmp_path):
    """Workspace folder with tracked, untracked and excluded files."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.c").write_text(SIMPLE_C)
    (tmp_path / "src" / "util.c").write_text("void a(void) {}\nvoid b(void) {}\n")
    (tmp_path / "src" / "util.h").write_text("void a(void);\nvoid b(void);\n")
    (tmp_path / "README.md").write_text("int not_code(void) {}\n")
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "generated.c").write_text("int gen(void) {}\n")
    (tmp_path / ".cache").mkdir()
    (tmp_path / ".cache" / "hidden.c").write_text("int hidden(void) {}\n")
    return tmp_path.resolve()


@pytest.fixture
def config():
    return CounterConfig()


@pytest.fixture
def table():
    return FileCountTable(".c")


@pytest.fixture
def tracker(table, config):
    tracker = FileTracker(table, config)
    yield tracker
    tracker.close()


@pytest.fixture
def stale_events(table):
    """Identities passed to the stale signal, in order."""
    events = []
    table.add_listener(events.append)
    return events
