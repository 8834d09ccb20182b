from __future__ import annotations

from pathlib import Path
import shutil
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for entry in (SRC, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

from recipebox import logger as logger_module  # noqa: E402
from recipebox.logger import logger  # noqa: E402


@pytest.fixture()
def example_site() -> Path:
    return ROOT / "fixtures" / "SiteExample"


@pytest.fixture()
def site_copy(example_site: Path, tmp_path: Path) -> Path:
    target = tmp_path / "site"
    shutil.copytree(example_site, target)
    return target


@pytest.fixture()
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    if logger_module._handler_id is not None:
        logger.remove(logger_module._handler_id)
        logger_module._handler_id = None


@pytest.fixture()
def log_records():
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
