"""Tests for dsc_engine/logging_setup.py."""

import logging

import pytest

from dsc_engine.logging_setup import configure_logging


@pytest.fixture()
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    tokens = logging.getLogger("dsc_engine.integration.tokens")
    tokens_level = tokens.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    tokens.setLevel(tokens_level)


class TestConfigureLogging:
    def test_single_handler(self, restore_root):
        configure_logging("INFO")
        configure_logging("INFO")
        assert len(restore_root.handlers) == 1
        assert restore_root.level == logging.INFO

    def test_level_name_case_insensitive(self, restore_root):
        configure_logging("warning")
        assert restore_root.level == logging.WARNING

    def test_unknown_level_falls_back(self, restore_root):
        configure_logging("chatty")
        assert restore_root.level == logging.INFO

    def test_token_noise_quieted_unless_debug(self, restore_root):
        configure_logging("INFO")
        assert logging.getLogger("dsc_engine.integration.tokens").level == logging.WARNING
        configure_logging("DEBUG")
        assert logging.getLogger("dsc_engine.integration.tokens").level == logging.DEBUG
