"""Bulk-register hunt codes from a CSV and write their signed tokens for printing.

Contract
- Input: CSV with columns `description,points` (one row per physical location).
- Output: CSV with columns `id,description,points,token`, in creation order.
- Uses the same backend and signing key as the server (`QRHUNT_*` environment).

Usage:
    uv run python scripts/issue_codes.py codes.csv -o tokens.csv
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from qrhunt.config import Settings, settings_from_env
from qrhunt.errors import ConfigurationError
from qrhunt.game import Hunt
from qrhunt.storage import create_backend
from qrhunt.tokens import issue_token

REQUIRED_COLUMNS = ["description", "points"]


def read_codes_csv(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns in {path}: {missing}")

    df = df[REQUIRED_COLUMNS].copy()
    if df["description"].isna().any():
        raise ValueError(f"Empty description in {path}")
    df["description"] = df["description"].astype(str).str.strip()
    if (df["description"] == "").any():
        raise ValueError(f"Empty description in {path}")
    if not pd.api.types.is_integer_dtype(df["points"]):
        raise ValueError(f"Non-integer points in {path}")
    if (df["points"] < 0).any():
        raise ValueError(f"Negative points in {path}")
    return df


def issue_codes(*, hunt: Hunt, codes: pd.DataFrame, signing_key: str | None) -> pd.DataFrame:
    if not signing_key:
        raise ConfigurationError("QRHUNT_SIGNING_KEY must be set to issue tokens")

    rows: list[dict[str, object]] = []
    for description, points in zip(codes["description"], codes["points"], strict=True):
        code = hunt.registry.create(description=str(description), points=int(points))
        rows.append(
            {
                "id": code.id,
                "description": code.description,
                "points": code.points,
                "token": issue_token(code, signing_key=signing_key),
            }
        )
    return pd.DataFrame(rows, columns=["id", "description", "points", "token"])


def main(argv: list[str] | None = None, *, settings: Settings | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("csv", type=Path, help="CSV with description,points columns")
    parser.add_argument("-o", "--output", type=Path, default=Path("tokens.csv"))
    args = parser.parse_args(argv)

    if settings is None:
        load_dotenv(override=False)
        settings = settings_from_env()

    codes = read_codes_csv(args.csv)
    backend = create_backend(settings)
    try:
        out = issue_codes(hunt=Hunt.from_backend(backend), codes=codes, signing_key=settings.signing_key)
    finally:
        backend.close()

    out.to_csv(args.output, index=False)
    print(f"Issued {len(out)} codes -> {args.output}")


if __name__ == "__main__":
    main()
