#!/usr/bin/env python3
"""
File: log_setup_test.py
Author: Bastian Cerf
Date: 18/10/2026
Description:
    Unit test of the logging configuration helpers.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import pytest
import logging
from pathlib import Path

# Internal libraries
from lazybroadcast.log_setup import (
    ColorFormatter,
    configure_logging,
    configure_from,
)
from lazybroadcast.manager_config import ManagerConfig


def test_color_formatter():
    """
    Only the formatted level name is colored, the record is unchanged.
    """
    record = logging.makeLogRecord(
        {"name": "test", "levelname": "ERROR", "levelno": logging.ERROR, "msg": "hi"}
    )

    text = ColorFormatter().format(record)

    assert "\033[91mERROR\033[0m" in text
    assert text.endswith("| test | hi")
    assert record.levelname == "ERROR"


def test_configure_logging_file(tmp_path: Path, restore_logging: None):
    log_file = tmp_path / "manager.log"

    root = configure_logging("debug", log_file)
    logging.getLogger("lazybroadcast.test").debug("fetch started")
    for handler in root.handlers:
        handler.flush()

    assert root.level == logging.DEBUG
    content = log_file.read_text(encoding="utf-8")
    assert "| DEBUG    | lazybroadcast.test | fetch started" in content


def test_configure_from_config(restore_logging: None):
    root = configure_from(ManagerConfig(log_level="WARNING"))
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1


def test_configure_unknown_level(restore_logging: None):
    with pytest.raises(ValueError):
        configure_logging("loud")
