#!/usr/bin/env python3
"""
File: conftest.py
Author: Bastian Cerf
Date: 18/10/2026
Description:
    Declaration of shared fixtures across unit test modules.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import pytest
import logging
from typing import Generator

# Internal libraries
from tests.classes_mocks import FakeDataManager, Recorder


@pytest.fixture
def manager() -> FakeDataManager:
    """
    Get a manager resolving its fetches manually.
    """
    return FakeDataManager(manual=True)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """
    Restore the root logger handlers and level after a test that
    reconfigures logging.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
