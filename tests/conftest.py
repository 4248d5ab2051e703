"""Shared fixtures for the Number Mask test suite."""

import os

import pytest

# Widgets are created without a display server
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from logger import setup_logger


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Route log files into the test's temporary directory."""
    return setup_logger(log_dir=tmp_path / "logs")


@pytest.fixture(scope="session")
def qt_app():
    QtWidgets = pytest.importorskip("PySide6.QtWidgets")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app
