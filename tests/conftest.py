"""Shared test fixtures for coverage-treemap tests."""

import pytest

from coverage_treemap.config import TreemapConfig
from coverage_treemap.coverage import CoverageAccumulator, CoverageAggregator

PROJECT_ROOT = "/repo"

USER = "/repo/src/app/models/user.py"
BILLING = "/repo/src/app/services/billing.py"
EMAIL = "/repo/src/app/services/email.py"
MAIN = "/repo/src/main.py"


@pytest.fixture
def facts_dict():
    """Coverage facts for a small project: two tests, four files, four methods.

    Expected totals:
        user.py     6 coverable, 2 covered
        billing.py 10 coverable, 4 covered
        email.py    3 coverable, 0 covered
        main.py     2 coverable, 1 covered  (directly in the source root)
    """
    return {
        "coverable": {
            USER: [1, 2, 3, 4, 5, 6],
            BILLING: list(range(1, 11)),
            EMAIL: [1, 2, 3],
            MAIN: [1, 2],
        },
        "tests": {
            "tests/test_user.py::test_name": {
                USER: {"1": 1, "2": 1, "3": 0},
                BILLING: {"1": 1, "2": 2, "5": 1},
            },
            "tests/test_billing.py::test_refund": {
                BILLING: {"5": 1, "6": 1, "20": 1},
                MAIN: {"1": 1},
            },
        },
        "methods": {
            USER: {"User::name": [1, 3], "User::save": [4, 6]},
            BILLING: {"Billing::charge": [1, 5], "Billing::refund": [6, 10]},
        },
    }


@pytest.fixture
def accumulator(facts_dict):
    return CoverageAccumulator.from_dict(facts_dict)


@pytest.fixture
def config():
    return TreemapConfig(project_root=PROJECT_ROOT, source_directories=["src"])


@pytest.fixture
def tree(accumulator, config):
    """Aggregated tree for ``facts_dict`` without scanning the filesystem."""
    return CoverageAggregator(config).build_from(accumulator, scan_sources=False)
