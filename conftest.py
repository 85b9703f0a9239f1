"""Configures pytest further: opt-out of slow tests and opt-in to extreme ones."""
import pytest

# marker: (option, skip when option is set, reason)
_GATES = {
    "slow": ("--skip-slow", True, "Slow test: needs no --skip-slow option"),
    "extreme": ("--run-extreme", False, "Extreme test: needs --run-extreme option"),
}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme",
                     action="store_true",
                     default=False,
                     help="run extreme value extremely slow tests, e.g. 8192 bit prime generation")


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slower tests, skipped with --skip-slow")
    config.addinivalue_line("markers", "extreme: extreme key size tests, run with --run-extreme")


def pytest_collection_modifyitems(config, items):
    skipdict = {
        marker: pytest.mark.skip(reason=reason)
        for marker, (option, skip_if_set, reason) in _GATES.items()
        if config.getoption(option) == skip_if_set
    }
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)
