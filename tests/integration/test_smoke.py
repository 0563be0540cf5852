"""
End-to-end tests for the Tamboon CLI.

The dry-run tests drive the whole pipeline through the simulated gateway.
The Omise test is opt-in and charges against the Omise test environment:

    RUN_INTEGRATION_TESTS=1 OMISE_PUBLIC_KEY=... OMISE_SECRET_KEY=... pytest tests/integration/
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tamboon.config import get_settings
from tamboon.gateway import simulated
from tamboon.main import app
from tamboon.orchestrator import run_donations
from scripts import generate_data
from tests.samples import SAMPLE_RECORDS, SAMPLE_TOTAL_REQUESTED

GENERATED_ROWS = 8

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fast_simulator(monkeypatch):
    """Drop the CLI's simulated network latency to keep the suite quick."""
    monkeypatch.setattr("tamboon.main.random_latency", lambda low, high: 0.0)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """The CLI reconfigures root logging onto the runner's streams; undo it."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_cli_dry_run_prints_summary_and_persists_json(encrypted_file: Path, tmp_path: Path):
    output = tmp_path / "summary.json"

    result = runner.invoke(
        app,
        ["run", str(encrypted_file), "--dry-run", "--interval-ms", "0", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert "Tamboon Donation Summary" in result.output
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["records"] == SAMPLE_RECORDS
    assert payload["total_requested"] == SAMPLE_TOTAL_REQUESTED
    assert payload["faulty_amount"] == payload["total_requested"] - payload["total_charged"]


def test_cli_missing_file_exits_non_zero(tmp_path: Path):
    result = runner.invoke(app, ["run", str(tmp_path / "nope.csv.rot128"), "--dry-run"])

    assert result.exit_code == 1
    assert "Error reading the file!" in result.output


def test_cli_without_gateway_keys_exits_non_zero(encrypted_file: Path, monkeypatch):
    monkeypatch.setenv("OMISE_PUBLIC_KEY", "")
    monkeypatch.setenv("OMISE_SECRET_KEY", "")

    result = runner.invoke(app, ["run", str(encrypted_file), "--no-table"])

    assert result.exit_code == 1
    assert "Gateway configuration error" in result.output


def test_cli_info_shows_settings():
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "interval=150ms" in result.output


def test_generated_file_runs_end_to_end(tmp_path: Path):
    path = tmp_path / "generated.csv.rot128"
    generate_data._generate_donations_csv(path, rows=GENERATED_ROWS, seed=3, faulty_ratio=0.5)

    summary = run_donations(path, gateway=simulated.SimulatedGateway(), interval_seconds=0.0)

    assert summary.records == GENERATED_ROWS
    assert summary.succeeded + summary.failed == GENERATED_ROWS
    assert summary.total_charged <= summary.total_requested


@pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and Omise test keys",
)
def test_omise_test_environment_run(encrypted_file: Path):
    settings = get_settings()
    if not settings.omise_public_key or not settings.omise_secret_key:
        pytest.skip("OMISE_PUBLIC_KEY / OMISE_SECRET_KEY not set")

    summary = run_donations(encrypted_file)

    assert summary.records == SAMPLE_RECORDS
    assert summary.total_requested == SAMPLE_TOTAL_REQUESTED
    assert summary.faulty_amount >= 0
