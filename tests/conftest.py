"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def unpack_config(tmp_path: Path):
    """Config rooted in a temporary input/output directory pair."""
    from core.config import UnpackConfig

    input_dir = tmp_path / "bundles"
    input_dir.mkdir()
    return replace(
        UnpackConfig.from_env(),
        input_dir=input_dir,
        output_dir=tmp_path / "output",
        gateway_url="https://gateway.test",
        max_workers=2,
        verify_signatures=True,
    )
