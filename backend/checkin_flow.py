# checkin_flow.py
#
# Three-step check-in flow:
#   1) validate token      (rate limited, read-only lookup)
#   2) collect student id  (format check only, no store access)
#   3) confirm             (the only step that changes token state)
#
# Nothing is kept server-side between steps: token and student id come back
# from the client as hidden form fields, so every step checks them again.
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from checkin_errors import NAV_BACK, NAV_HOME, AlreadyUsed, FormatInvalid, NotFound, RateLimited
from checkin_store import RedemptionRecord, TokenStatus, TokenStore, student_id_format_ok, token_format_ok
from checkin_rate_limit import RateLimiter


@dataclass(frozen=True)
class CheckinConfig:
    token_count: int = 50
    host: str = "0.0.0.0"
    port: int = 8888
    output_dir: str = "."
    rate_window_sec: int = 10
    confirm_delay_sec: int = 3


@dataclass
class CheckinState:
    """Process-wide state, built once at startup and handed to the router."""

    store: TokenStore
    limiter: RateLimiter
    config: CheckinConfig


def check_token_format(token: str) -> str:
    if not token_format_ok(token):
        raise FormatInvalid("Invalid token format.", nav=NAV_HOME)
    return token


def check_student_id_format(student_id: str) -> str:
    if not student_id_format_ok(student_id):
        raise FormatInvalid("Invalid student ID format.", nav=NAV_BACK)
    return student_id


def validate_token(state: CheckinState, client_id: str, token: str) -> str:
    """Step 1. Does not reserve the token: two holders may both pass here."""
    check_token_format(token)

    window = state.config.rate_window_sec
    if not state.limiter.try_acquire(client_id, window):
        raise RateLimited(window)

    status = state.store.lookup(token)
    if status is TokenStatus.USED:
        raise AlreadyUsed()
    if status is TokenStatus.UNKNOWN:
        raise NotFound()
    return token


def collect_identifier(token: str, student_id: str) -> Tuple[str, str]:
    """Step 2."""
    check_student_id_format(student_id)
    check_token_format(token)
    return token, student_id


def confirm(state: CheckinState, token: str, student_id: str) -> RedemptionRecord:
    """Step 3. Raises AlreadyUsed / NotFound from the store's atomic redeem."""
    check_student_id_format(student_id)
    check_token_format(token)
    record = state.store.redeem(token, student_id)
    print(f"[checkin] redeemed token {record.token} for student {record.student_id}")
    return record
