"""Smoke tests for the Number Mask entrypoint module."""

from __future__ import annotations

import builtins
import importlib.util
import io
import sys
import types
from contextlib import redirect_stdout
from pathlib import Path

import pytest


def load_entrypoint_module():
    """Load the project entrypoint module without running it as ``__main__``."""
    module_path = Path(__file__).resolve().parents[1] / "__main__.py"
    spec = importlib.util.spec_from_file_location("number_mask_entry", module_path)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def entry_module():
    return load_entrypoint_module()


def test_parse_arguments_defaults(entry_module):
    args = entry_module.parse_arguments([])
    assert args.locale is None
    assert not args.check_deps
    assert not args.debug


def test_parse_arguments_locale(entry_module):
    args = entry_module.parse_arguments(["--locale", "de-DE", "--log-dir", "logs"])
    assert args.locale == "de-DE"
    assert args.log_dir == "logs"


def test_check_dependencies_reports_missing_required(entry_module, monkeypatch):
    """check_dependencies should fail gracefully when PySide6 is unavailable."""
    numpy_stub = types.ModuleType("numpy")
    numpy_stub.__version__ = "0.0"
    monkeypatch.setitem(sys.modules, "numpy", numpy_stub)

    real_import = builtins.__import__

    def fake_import(name, globals=None, locals=None, fromlist=(), level=0):  # noqa: D401
        if name.startswith("PySide6"):
            raise ImportError("No module named PySide6")
        return real_import(name, globals, locals, fromlist, level)

    monkeypatch.setattr(builtins, "__import__", fake_import)

    buffer = io.StringIO()
    with redirect_stdout(buffer):
        result = entry_module.check_dependencies()

    output = buffer.getvalue()

    assert result is False
    assert "Missing required dependencies" in output
    assert "PySide6" in output


def test_check_deps_flag_exits_cleanly(entry_module, monkeypatch):
    monkeypatch.setattr(entry_module, "check_dependencies", lambda: True)

    buffer = io.StringIO()
    with redirect_stdout(buffer):
        exit_code = entry_module.main(["--check-deps"])

    assert exit_code == 0
    assert "All dependencies are satisfied" in buffer.getvalue()


def test_missing_dependencies_block_startup(entry_module, monkeypatch):
    monkeypatch.setattr(entry_module, "check_dependencies", lambda: False)

    with redirect_stdout(io.StringIO()):
        assert entry_module.main([]) == 1


def test_unknown_locale_rejected_before_startup(entry_module, monkeypatch, tmp_path):
    pytest.importorskip("PySide6.QtCore")
    monkeypatch.setattr(entry_module, "check_dependencies", lambda: True)

    buffer = io.StringIO()
    with redirect_stdout(buffer):
        exit_code = entry_module.main(["--locale", "qq-QQ", "--log-dir", str(tmp_path)])

    assert exit_code == 2
    assert "Invalid number mask settings" in buffer.getvalue()
