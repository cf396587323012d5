"""Unit tests configuration file."""

import os

import pytest

LAYOUT_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), "layout")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def structs_layout():
    """Text of the shared layout fixture file."""
    with open(os.path.join(LAYOUT_DIR, "structs.layout"), encoding="utf-8") as f:
        return f.read()
