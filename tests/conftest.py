"""
Pytest configuration for the ufunc tests.

This file ensures that the project root is in the Python path
so that test files can import ufunc without installing it.
"""

import sys
import logging
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from ufunc.utils import clear_performance_metrics


class TrackedSource:
    """Iterator over items that records in log when it is closed"""

    def __init__(self, name, items, log):
        self.name = name
        self.items = list(items)
        self.log = log
        self.position = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self.position >= len(self.items):
            raise StopIteration
        item = self.items[self.position]
        self.position += 1
        return item

    def close(self):
        self.log.append(self.name)


@pytest.fixture
def closed_log():
    return []


@pytest.fixture
def tracked(closed_log):
    """Factory for TrackedSource objects sharing one close log"""
    def make(name, items):
        return TrackedSource(name, items, closed_log)
    return make


@pytest.fixture(autouse=True)
def reset_ufunc_state():
    """Clear recorded metrics and any handlers a test attached to the 'ufunc' logger"""
    clear_performance_metrics()
    yield
    clear_performance_metrics()
    logger = logging.getLogger('ufunc')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
