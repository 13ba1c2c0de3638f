from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sqlpatch.core.config import settings
from sqlpatch.main import app
from tests.utils.templates import TEMPLATE_FILES


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    d = tmp_path / "sql"
    d.mkdir()
    for name, text in TEMPLATE_FILES.items():
        (d / name).write_text(text, encoding="utf-8")
    return d


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def client(
    templates_dir: Path, output_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(settings, "TEMPLATES_DIR", templates_dir)
    monkeypatch.setattr(settings, "OUTPUT_DIR", output_dir)
    with TestClient(app) as c:
        yield c
