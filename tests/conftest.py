import base64
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Allow running the suite from a checkout without installing the package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Qt tests run headless.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from inventario.store import InventoryRepository  # noqa: E402

PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAusB9Y4nKwAAAABJRU5ErkJggg=="
)
PNG_BASE64 = base64.b64encode(PNG_BYTES).decode("ascii")
PNG_DATA_URL = f"data:image/png;base64,{PNG_BASE64}"


class StepClock:
    """``datetime.now`` replacement that advances one minute per call."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 30, 0)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(minutes=1)
        return value


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "appdata"
    path.mkdir()
    return path


@pytest.fixture
def make_repository(clock: StepClock) -> Iterator[Callable[..., InventoryRepository]]:
    opened: list[InventoryRepository] = []

    def _make(root: Path, **kwargs) -> InventoryRepository:
        kwargs.setdefault("now", clock)
        repo = InventoryRepository(root, **kwargs)
        opened.append(repo)
        return repo

    yield _make
    for repo in opened:
        repo.close()


@pytest.fixture
def repository(make_repository, data_dir: Path) -> InventoryRepository:
    return make_repository(data_dir)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_base64() -> str:
    return PNG_BASE64


@pytest.fixture
def png_data_url() -> str:
    return PNG_DATA_URL
