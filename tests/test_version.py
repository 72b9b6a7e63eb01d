"""Tests for the package version metadata."""

import importlib

import pytest
from packaging.version import Version

import owt
from owt import _version as version_module


def test_version_has_three_release_components():
    version = Version(owt.__version__)

    assert len(version.release) == 3


def test_release_environment_overrides_metadata(monkeypatch):
    monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", "3.2.1")
    importlib.reload(version_module)
    reloaded = importlib.reload(owt)

    assert reloaded.__version__ == "3.2.1"

    for invalid in ("not-a-version", "1.2"):
        monkeypatch.setenv("PYTHON_SEMANTIC_RELEASE_VERSION", invalid)
        with pytest.raises(RuntimeError):
            importlib.reload(version_module)

    monkeypatch.delenv("PYTHON_SEMANTIC_RELEASE_VERSION", raising=False)
    importlib.reload(version_module)
    importlib.reload(owt)
