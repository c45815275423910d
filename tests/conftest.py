from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest

from tailpoll.engine import TailEngine


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # config.yaml goes to ~/.config/tailpoll
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    p = tmp_path / "app.log"
    p.write_bytes(b"")
    return p


def _append(path: Path, data) -> None:
    if isinstance(data, str):
        data = data.encode("utf-8")
    with path.open("ab") as f:
        f.write(data)


@pytest.fixture
def append():
    return _append


@pytest.fixture
def make_engine(log_file: Path) -> Callable[..., TailEngine]:
    created: List[TailEngine] = []

    def _make(**kwargs) -> TailEngine:
        kwargs.setdefault("delimiter", "\n")
        eng = TailEngine(kwargs.pop("path", log_file), **kwargs)
        created.append(eng)
        return eng

    yield _make

    for eng in created:
        eng.stop()


@pytest.fixture
def collect():
    def _collect(engine: TailEngine) -> List[str]:
        lines: List[str] = []
        engine.line_added.connect(lines.append)
        return lines

    return _collect
