"""Shared test fixtures."""

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config_path() -> Path:
    return FIXTURES_DIR / "sample_config.json"


@pytest.fixture
def frames(tmp_path: Path) -> list[Path]:
    """Five empty frame files in capture order."""
    paths = []
    for i in range(1, 6):
        p = tmp_path / f"frame_{i:04d}.png"
        p.write_bytes(b"")
        paths.append(p)
    return paths
