# tests/test_checkin_store.py
"""Token pool / ledger invariants and the atomic redeem."""

import errno
import threading
from pathlib import Path

import pytest

from checkin_errors import AlreadyUsed, NotFound, RecordWriteFailed
from checkin_store import (
    RecordWriter,
    RedemptionRecord,
    TokenStatus,
    TokenStore,
    student_id_format_ok,
    token_format_ok,
)


@pytest.fixture()
def store(records_file: Path) -> TokenStore:
    return TokenStore({"11112222", "33334444"}, RecordWriter(records_file))


@pytest.mark.parametrize("token", ["1", "12345678", "00000000"])
def test_token_format_accepts_one_to_eight_digits(token):
    assert token_format_ok(token)


@pytest.mark.parametrize("token", ["", "123456789", "1234a678", " 1234567", "１２３", "12\n"])
def test_token_format_rejects(token):
    assert not token_format_ok(token)


def test_student_id_format_bounds():
    assert student_id_format_ok("9" * 20)
    assert not student_id_format_ok("9" * 21)
    assert not student_id_format_ok("")
    assert not student_id_format_ok("12-34")


def test_lookup_states(store):
    assert store.lookup("11112222") is TokenStatus.UNUSED
    assert store.lookup("99999999") is TokenStatus.UNKNOWN
    store.redeem("11112222", "42")
    assert store.lookup("11112222") is TokenStatus.USED


def test_is_redeemable(store):
    assert store.is_redeemable("11112222")
    assert not store.is_redeemable("99999999")
    assert not store.is_redeemable("111122223")
    store.redeem("11112222", "42")
    assert not store.is_redeemable("11112222")


def test_redeem_moves_token_and_appends_record(store, record_lines):
    record = store.redeem("11112222", "999")

    assert record == RedemptionRecord(token="11112222", student_id="999")
    assert store.pool_size() == 1
    assert store.used_count() == 1
    assert record_lines() == ["11112222,999"]
    assert store.writer.written == 1


def test_redeem_twice_fails_already_used(store, record_lines):
    store.redeem("11112222", "1")
    with pytest.raises(AlreadyUsed):
        store.redeem("11112222", "2")
    assert record_lines() == ["11112222,1"]


def test_redeem_unknown_token_fails_not_found(store, record_lines):
    with pytest.raises(NotFound):
        store.redeem("55556666", "1")
    assert store.pool_size() == 2
    assert record_lines() == []


def test_pool_and_ledger_partition_issued_set(store):
    issued = {"11112222", "33334444"}
    store.redeem("33334444", "7")
    for token in issued:
        assert store.lookup(token) in (TokenStatus.UNUSED, TokenStatus.USED)
    assert store.pool_size() + store.used_count() == len(issued)


def test_records_are_appended_in_confirmation_order(store, record_lines):
    store.redeem("33334444", "2")
    store.redeem("11112222", "1")
    assert record_lines() == ["33334444,2", "11112222,1"]


def test_concurrent_redeem_exactly_one_success(records_file, record_lines):
    store = TokenStore({"11112222"}, RecordWriter(records_file))
    n = 16
    barrier = threading.Barrier(n)
    results = []
    results_lock = threading.Lock()

    def worker(i):
        barrier.wait()
        try:
            store.redeem("11112222", str(i))
            outcome = "ok"
        except AlreadyUsed:
            outcome = "used"
        except NotFound:
            outcome = "missing"
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert len(results) == n
    lines = record_lines()
    assert len(lines) == 1
    assert lines[0].startswith("11112222,")


def test_failed_append_rolls_back(tmp_path, capsys):
    # a directory cannot be opened for appending
    writer = RecordWriter(tmp_path)
    store = TokenStore({"11112222"}, writer)

    with pytest.raises(RecordWriteFailed):
        store.redeem("11112222", "1")

    assert store.lookup("11112222") is TokenStatus.UNUSED
    assert store.used_count() == 0
    assert writer.written == 0
    assert "[records] FAILED" in capsys.readouterr().err


class ShortWriteRecordWriter(RecordWriter):
    """Writes a few bytes of the next line, then fails as a full disk would."""

    def __init__(self, path):
        super().__init__(path)
        self.fail_next = True

    def _write_all(self, f, data):
        if self.fail_next:
            self.fail_next = False
            f.write(data[:5])
            raise OSError(errno.ENOSPC, "No space left on device")
        super()._write_all(f, data)


def test_partial_append_is_cut_back(records_file, record_lines):
    records_file.write_text("33334444,7\n", encoding="utf-8")
    writer = ShortWriteRecordWriter(records_file)
    store = TokenStore({"11112222"}, writer)

    with pytest.raises(RecordWriteFailed):
        store.redeem("11112222", "1")
    assert record_lines() == ["33334444,7"]
    assert store.lookup("11112222") is TokenStatus.UNUSED

    store.redeem("11112222", "2")
    assert record_lines() == ["33334444,7", "11112222,2"]
    assert writer.written == 1
