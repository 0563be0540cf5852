"""
Synthetic donation file generator for Tamboon.

Implements deterministic pseudo-random donor generation, CSV emission and
ROT-128 encryption, producing files in the same shape as the real input
(e.g. `data/fng.1000.csv.rot128`).
"""

from __future__ import annotations

import random
import sys
import time
from datetime import date
from pathlib import Path

import typer

from tamboon.cipher import encrypt_rot128

app = typer.Typer(help="Generate a synthetic, ROT-128 encrypted donation CSV.")

HEADER = ["Name", "AmountSubunits", "CCNumber", "CVV", "ExpMonth", "ExpYear"]

_FIRST_NAMES = ["Somchai", "Malee", "Niran", "Ploy", "Arthit", "Kanya", "Anan", "Suda", "Chai", "Dara"]
_LAST_NAMES = ["Srisuk", "Wongsa", "Chaiyo", "Thongdee", "Meesuk", "Rattana", "Bunma", "Kaewkla"]
_CARD_PREFIXES = ["4", "51", "52", "53", "54", "55"]


def _luhn_complete(partial: str) -> str:
    """Append the Luhn check digit to `partial`."""
    checksum = 0
    for index, ch in enumerate(reversed(partial)):
        digit = int(ch)
        if index % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return partial + str((10 - checksum % 10) % 10)


def _card_number(rng: random.Random) -> str:
    prefix = rng.choice(_CARD_PREFIXES)
    body = "".join(str(rng.randint(0, 9)) for _ in range(15 - len(prefix)))
    return _luhn_complete(prefix + body)


def _generate_rows(rows: int, seed: int, faulty_ratio: float) -> list[list[str]]:
    rng = random.Random(seed)
    this_year = date.today().year
    generated: list[list[str]] = []
    for _ in range(rows):
        name = f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}"
        amount = rng.randint(20, 5_000_000)
        card = _card_number(rng)
        year = rng.randint(this_year + 1, this_year + 5)
        if rng.random() < faulty_ratio:
            # Either an expired card or a number failing the Luhn check.
            if rng.random() < 0.5:
                year = rng.randint(this_year - 6, this_year - 1)
            else:
                card = card[:-1] + str((int(card[-1]) + 1) % 10)
        generated.append(
            [name, str(amount), card, f"{rng.randint(0, 999):03d}", str(rng.randint(1, 12)), str(year)]
        )
    return generated


def _generate_donations_csv(csv_path: Path, rows: int, seed: int, faulty_ratio: float = 0.1) -> None:
    """Write `rows` donations plus a header to `csv_path`, ROT-128 encrypted."""
    # Plain comma-joined fields, no quoting: records are split on "," when read.
    lines = [",".join(HEADER)]
    lines.extend(",".join(row) for row in _generate_rows(rows, seed, faulty_ratio))
    text = "\n".join(lines) + "\n"
    csv_path.write_bytes(encrypt_rot128(text.encode("utf-8")))


@app.command()
def main(
    output: Path = typer.Option(
        Path("data/donations.csv.rot128"),
        "--output",
        "-o",
        help="Encrypted CSV output path.",
    ),
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of donations to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    faulty_ratio: float = typer.Option(
        0.1,
        "--faulty-ratio",
        min=0.0,
        max=1.0,
        help="Share of donations with an expired or invalid card.",
    ),
) -> None:
    """
    Generate synthetic donations and write them ROT-128 encrypted.
    """
    start = time.perf_counter()
    output.parent.mkdir(parents=True, exist_ok=True)
    typer.echo(f"Generating {rows:,} donations -> {output} (seed={seed}, faulty_ratio={faulty_ratio})")
    _generate_donations_csv(output, rows=rows, seed=seed, faulty_ratio=faulty_ratio)
    typer.echo(f"Done in {time.perf_counter() - start:.2f}s")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
