# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from checkin_app import create_app
from checkin_flow import CheckinConfig, CheckinState
from checkin_store import RecordWriter, TokenStore
from checkin_rate_limit import RateLimiter

TOKEN = "12345678"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def records_file(tmp_path: Path) -> Path:
    return tmp_path / "records-test.txt"


@pytest.fixture()
def make_state(records_file: Path, clock: FakeClock) -> Callable[..., CheckinState]:
    def _make(tokens: tuple[str, ...] = (TOKEN,), rate_window_sec: int = 10) -> CheckinState:
        return CheckinState(
            store=TokenStore(tokens, RecordWriter(records_file)),
            limiter=RateLimiter(clock=clock),
            config=CheckinConfig(
                token_count=len(tokens),
                output_dir=str(records_file.parent),
                rate_window_sec=rate_window_sec,
            ),
        )

    return _make


@pytest.fixture()
def state(make_state: Callable[..., CheckinState]) -> CheckinState:
    return make_state()


@pytest.fixture()
def client(state: CheckinState) -> Iterator[TestClient]:
    with TestClient(create_app(state)) as c:
        yield c


@pytest.fixture()
def record_lines(records_file: Path) -> Callable[[], list[str]]:
    def _read() -> list[str]:
        if not records_file.exists():
            return []
        return records_file.read_text(encoding="utf-8").splitlines()

    return _read
