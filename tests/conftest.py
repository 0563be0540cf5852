"""
Pytest configuration for Tamboon.

Provides fixtures for:
- Settings cache isolation
- Plain and ROT-128 encrypted donation files
- A deterministic simulated gateway
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from tamboon.cipher import encrypt_rot128
from tamboon.config import get_settings
from tamboon.gateway.simulated import SimulatedGateway
from tests.samples import REFERENCE_DATE, SAMPLE_CSV, VISA_DECLINED


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings so env overrides in one test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def encrypted_file(tmp_path: Path) -> Path:
    """SAMPLE_CSV written ROT-128 encrypted."""
    path = tmp_path / "fng.csv.rot128"
    path.write_bytes(encrypt_rot128(SAMPLE_CSV.encode("utf-8")))
    return path


@pytest.fixture
def simulated_gateway() -> SimulatedGateway:
    return SimulatedGateway(declined_cards=[VISA_DECLINED], today=REFERENCE_DATE)
