# checkin_store.py
from __future__ import annotations

import enum
import re
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Set, Union

from checkin_errors import AlreadyUsed, NotFound, RecordWriteFailed

TOKEN_RE = re.compile(r"[0-9]{1,8}")
STUDENT_ID_RE = re.compile(r"[0-9]{1,20}")


def token_format_ok(token: str) -> bool:
    return TOKEN_RE.fullmatch(token or "") is not None


def student_id_format_ok(student_id: str) -> bool:
    return STUDENT_ID_RE.fullmatch(student_id or "") is not None


class TokenStatus(enum.Enum):
    UNUSED = "unused"
    USED = "used"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RedemptionRecord:
    token: str
    student_id: str

    def to_line(self) -> str:
        return f"{self.token},{self.student_id}"


# ---------------------------
# Durable redemption record (append-only text file)
# ---------------------------
class RecordWriter:
    """Appends one `token,student_id` line per redemption.

    The file is opened in append mode for every write and created on first use,
    so nothing is left open between requests. A write that fails partway is cut
    back to the previous end of file, so the file only ever holds whole lines.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.written = 0

    def append(self, record: RedemptionRecord) -> None:
        data = (record.to_line() + "\n").encode("utf-8")
        # unbuffered: nothing is left in a buffer to be flushed after truncate
        with open(self.path, "ab", buffering=0) as f:
            end = f.tell()
            try:
                self._write_all(f, data)
            except OSError:
                f.truncate(end)
                raise
        self.written += 1

    def _write_all(self, f, data: bytes) -> None:
        view = memoryview(data)
        while view:
            n = f.write(view)
            view = view[n:]


# ---------------------------
# Token pool + ledger
# ---------------------------
class TokenStore:
    """Pool of unused tokens and ledger of used ones behind a single lock.

    Pool and ledger are disjoint and their union is the issued set; the only
    mutation is `redeem`, which moves one token from pool to ledger.
    """

    def __init__(self, tokens: Iterable[str], writer: RecordWriter):
        self._pool: Set[str] = set(tokens)
        self._used: Set[str] = set()
        self._writer = writer
        self._lock = threading.Lock()

    @property
    def writer(self) -> RecordWriter:
        return self._writer

    def lookup(self, token: str) -> TokenStatus:
        with self._lock:
            if token in self._used:
                return TokenStatus.USED
            if token in self._pool:
                return TokenStatus.UNUSED
            return TokenStatus.UNKNOWN

    def is_redeemable(self, token: str) -> bool:
        if not token_format_ok(token):
            return False
        return self.lookup(token) is TokenStatus.UNUSED

    def redeem(self, token: str, student_id: str) -> RedemptionRecord:
        record = RedemptionRecord(token=token, student_id=student_id)
        with self._lock:
            if token in self._used:
                raise AlreadyUsed()
            if token not in self._pool:
                raise NotFound()
            self._pool.remove(token)
            self._used.add(token)

            # Append under the lock so the record order is the confirmation order.
            try:
                self._writer.append(record)
            except OSError as e:
                self._used.remove(token)
                self._pool.add(token)
                print(
                    f"[records] FAILED to append '{record.to_line()}' to {self._writer.path}: {e}; "
                    "token returned to pool",
                    file=sys.stderr,
                )
                raise RecordWriteFailed() from e
        return record

    def pool_size(self) -> int:
        with self._lock:
            return len(self._pool)

    def used_count(self) -> int:
        with self._lock:
            return len(self._used)
