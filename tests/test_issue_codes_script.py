from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import pandas as pd
import pytest

from qrhunt.config import DeploymentMode, Settings
from qrhunt.storage import LocalBackend
from qrhunt.tokens import verify_token

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "issue_codes.py"


@pytest.fixture(scope="module")
def issue_codes() -> ModuleType:
    spec = importlib.util.spec_from_file_location("issue_codes", SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_issues_tokens_for_every_row(issue_codes: ModuleType, tmp_path: Path) -> None:
    src = tmp_path / "codes.csv"
    out = tmp_path / "tokens.csv"
    pd.DataFrame({"description": ["Fountain", " Bench "], "points": [10, 5]}).to_csv(src, index=False)

    settings = Settings(mode=DeploymentMode.embedded, signing_key="secret", data_dir=tmp_path / "data")
    issue_codes.main([str(src), "-o", str(out)], settings=settings)

    issued = pd.read_csv(out)
    assert list(issued.columns) == ["id", "description", "points", "token"]
    assert issued["id"].tolist() == [1, 2]
    assert issued["description"].tolist() == ["Fountain", "Bench"]
    for code_id, token in zip(issued["id"], issued["token"], strict=True):
        assert verify_token(token, signing_key="secret").code_id == code_id

    assert [c.id for c in LocalBackend(data_dir=tmp_path / "data").list_codes()] == [1, 2]


@pytest.mark.parametrize(
    "frame",
    [
        {"description": ["Fountain"]},
        {"description": ["Fountain"], "points": [-1]},
        {"description": ["Fountain"], "points": [1.5]},
        {"description": [None], "points": [1]},
    ],
)
def test_rejects_bad_csv(issue_codes: ModuleType, tmp_path: Path, frame: dict) -> None:
    src = tmp_path / "codes.csv"
    pd.DataFrame(frame).to_csv(src, index=False)
    with pytest.raises(ValueError):
        issue_codes.read_codes_csv(src)


def test_requires_signing_key(issue_codes: ModuleType, tmp_path: Path) -> None:
    from qrhunt.errors import ConfigurationError
    from qrhunt.game import Hunt

    codes = pd.DataFrame({"description": ["Fountain"], "points": [10]})
    hunt = Hunt.from_backend(LocalBackend(data_dir=tmp_path))
    with pytest.raises(ConfigurationError):
        issue_codes.issue_codes(hunt=hunt, codes=codes, signing_key=None)
    assert hunt.registry.codes() == []
