from __future__ import annotations

import json
import random
from pathlib import Path

import pytest

from tamboon import orchestrator
from tamboon.domain.models import AggregateState, DonationSummary
from tamboon.exceptions import GatewayConfigurationError, InputFileError
from tamboon.gateway.simulated import SimulatedGateway, random_latency
from tamboon.orchestrator import build_summary, persist_summary, process_source, run_donations
from tamboon.pipeline.source import RecordSource
from tests.samples import (
    MASTERCARD,
    REFERENCE_DATE,
    SAMPLE_RECORDS,
    SAMPLE_SUCCEEDED,
    SAMPLE_TOP_DONORS,
    SAMPLE_TOTAL_CHARGED,
    SAMPLE_TOTAL_REQUESTED,
    VISA,
    VISA_DECLINED,
    record_line,
)

HEADER = "Name,AmountSubunits,CCNumber,CVV,ExpMonth,ExpYear"
STRESS_RECORDS = 1000


def test_build_summary_zero_records_has_zero_average():
    summary = build_summary(AggregateState(), currency="thb")

    assert summary.records == 0
    assert summary.average_per_donor == 0
    assert summary.top_donors == []
    assert summary.faulty_amount == 0


def test_build_summary_divides_by_processed_records():
    state = AggregateState(
        total_requested=1000,
        total_charged=600,
        processed=3,
        succeeded=2,
        ranking={100: "A", 200: "B", 300: "C", 400: "D"},
    )

    summary = build_summary(state, currency="thb", top_count=3, duration_seconds=1.23456)

    assert summary.faulty_amount == 400
    assert summary.average_per_donor == 200
    assert summary.failed == 1
    assert summary.top_donors == ["D", "C", "B"]
    assert summary.duration_seconds == pytest.approx(1.235)


def test_process_source_sample(sample_csv: str, simulated_gateway: SimulatedGateway):
    reports: list[DonationSummary] = []

    summary = process_source(
        RecordSource(sample_csv.encode("utf-8")),
        simulated_gateway,
        interval_seconds=0.0,
        max_workers=4,
        currency="thb",
        top_count=3,
        on_report=reports.append,
    )

    assert reports == [summary]
    assert summary.records == SAMPLE_RECORDS
    assert summary.succeeded == SAMPLE_SUCCEEDED
    assert summary.total_requested == SAMPLE_TOTAL_REQUESTED
    assert summary.total_charged == SAMPLE_TOTAL_CHARGED
    assert summary.faulty_amount == SAMPLE_TOTAL_REQUESTED - SAMPLE_TOTAL_CHARGED
    assert summary.average_per_donor == SAMPLE_TOTAL_CHARGED // SAMPLE_RECORDS
    assert summary.top_donors == SAMPLE_TOP_DONORS


def test_process_source_header_only_input(simulated_gateway: SimulatedGateway):
    reports: list[DonationSummary] = []

    summary = process_source(
        RecordSource(f"{HEADER}\n".encode("utf-8")),
        simulated_gateway,
        interval_seconds=0.15,
        on_report=reports.append,
    )

    assert reports == [summary]
    assert summary.records == 0
    assert summary.average_per_donor == 0
    assert simulated_gateway.token_calls == 0


def test_process_source_collision_keeps_one_of_two_donors(simulated_gateway: SimulatedGateway):
    lines = [HEADER, record_line("Alice", 500), record_line("Bob", 500, card=MASTERCARD)]

    summary = process_source(
        RecordSource("\n".join(lines).encode("utf-8")),
        simulated_gateway,
        interval_seconds=0.0,
        top_count=3,
    )

    assert summary.total_charged == 1000
    assert len(summary.top_donors) == 1
    assert summary.top_donors[0] in {"Alice", "Bob"}


def test_concurrent_run_matches_sequential_baseline():
    rng = random.Random(2024)
    lines = [HEADER]
    expected_requested = 0
    expected_charged = 0
    for index in range(STRESS_RECORDS):
        amount = rng.randint(1, 100_000)
        roll = rng.random()
        if roll < 0.1:
            line = record_line(f"donor-{index}", amount, year=2019)
        elif roll < 0.2:
            line = record_line(f"donor-{index}", amount, card=VISA_DECLINED)
        elif roll < 0.25:
            line = f"donor-{index},{amount},{VISA}"
            amount = 0
        else:
            line = record_line(f"donor-{index}", amount, card=rng.choice([VISA, MASTERCARD]))
            expected_charged += amount
        expected_requested += amount
        lines.append(line)

    gateway = SimulatedGateway(
        latency=random_latency(0.0, 0.004, seed=7),
        declined_cards=[VISA_DECLINED],
        today=REFERENCE_DATE,
    )
    summary = process_source(
        RecordSource("\n".join(lines).encode("utf-8")),
        gateway,
        interval_seconds=0.0,
        max_workers=32,
    )

    assert summary.records == STRESS_RECORDS
    assert summary.total_requested == expected_requested
    assert summary.total_charged == expected_charged
    assert summary.faulty_amount == expected_requested - expected_charged
    assert summary.faulty_amount >= 0


def test_run_donations_reads_encrypted_file(encrypted_file: Path, simulated_gateway: SimulatedGateway):
    summary = run_donations(encrypted_file, gateway=simulated_gateway, interval_seconds=0.0)

    assert summary.total_charged == SAMPLE_TOTAL_CHARGED
    assert summary.top_donors == SAMPLE_TOP_DONORS


def test_run_donations_missing_file_aborts_before_gateway(tmp_path: Path, monkeypatch):
    def fail_if_called(*args, **kwargs):
        raise AssertionError("gateway must not be built for an unreadable file")

    monkeypatch.setattr(orchestrator.OmiseGateway, "from_settings", fail_if_called)

    with pytest.raises(InputFileError):
        run_donations(tmp_path / "missing.rot128")


def test_run_donations_without_keys_fails_fast(encrypted_file: Path, monkeypatch):
    monkeypatch.setenv("OMISE_PUBLIC_KEY", "")
    monkeypatch.setenv("OMISE_SECRET_KEY", "")

    with pytest.raises(GatewayConfigurationError):
        run_donations(encrypted_file)


def test_run_donations_closes_gateway_it_builds(encrypted_file: Path, monkeypatch):
    class _ClosingGateway(SimulatedGateway):
        instances: list["_ClosingGateway"] = []

        def __init__(self) -> None:
            super().__init__(today=REFERENCE_DATE)
            self.closed = False
            _ClosingGateway.instances.append(self)

        def close(self) -> None:
            self.closed = True

    monkeypatch.setattr(orchestrator.OmiseGateway, "from_settings", lambda: _ClosingGateway())

    run_donations(encrypted_file, interval_seconds=0.0)

    assert len(_ClosingGateway.instances) == 1
    assert _ClosingGateway.instances[0].closed is True


def test_persist_summary_writes_json(tmp_path: Path):
    summary = build_summary(
        AggregateState(total_requested=10, total_charged=10, processed=1, succeeded=1, ranking={10: "A"}),
        currency="thb",
    )

    path = persist_summary(summary, tmp_path / "results" / "latest.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["total_charged"] == 10
    assert payload["top_donors"] == ["A"]
    assert payload["currency"] == "thb"


def test_process_source_survives_gateway_overcharge():
    class _OverchargingGateway(SimulatedGateway):
        def create_charge(self, amount, currency, token_id):
            return super().create_charge(amount + 1, currency, token_id)

    reports: list[DonationSummary] = []
    lines = [HEADER, record_line("Alice", 100), record_line("Bob", 250, card=MASTERCARD)]

    summary = process_source(
        RecordSource("\n".join(lines).encode("utf-8")),
        _OverchargingGateway(today=REFERENCE_DATE),
        interval_seconds=0.0,
        on_report=reports.append,
    )

    assert reports == [summary]
    assert summary.total_requested == 350
    assert summary.total_charged == 350
    assert summary.faulty_amount == 0
    assert summary.top_donors == ["Bob", "Alice"]
