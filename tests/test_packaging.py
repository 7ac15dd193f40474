"""Tests for the installable package layout declared in pyproject.toml."""

from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _load() -> dict:
    with PYPROJECT.open("rb") as fh:
        return tomllib.load(fh)


class TestPackageLayout:
    def test_only_callsnap_packages_are_installed(self):
        find = _load()["tool"]["setuptools"]["packages"]["find"]
        assert find["include"] == ["src.callsnap*"]
        assert "src*" not in find["include"]

    def test_caption_library_is_declared(self):
        dependencies = _load()["project"]["dependencies"]
        assert any(dep.startswith("webvtt-py") for dep in dependencies)
