# checkin_issuance.py
import random
import secrets
import time
from pathlib import Path
from typing import Iterable, Optional, Set, Union

TOKEN_MIN = 10_000_000
TOKEN_MAX = 99_999_999  # exclusive
MAX_TOKENS = TOKEN_MAX - TOKEN_MIN


def issue_tokens(count: int, rng: Optional[random.Random] = None) -> Set[str]:
    """
    Draw exactly `count` distinct 8-digit tokens.

    Duplicate samples are rejected and redrawn, so the result always has
    `count` elements.
    """
    if count < 0 or count > MAX_TOKENS:
        raise ValueError(f"token count must be between 0 and {MAX_TOKENS}, got {count}")
    rng = rng or secrets.SystemRandom()
    tokens: Set[str] = set()
    while len(tokens) < count:
        tokens.add(str(rng.randrange(TOKEN_MIN, TOKEN_MAX)))
    return tokens


def run_stamp(ts: Optional[float] = None) -> str:
    # local time, filesystem-safe (no colons)
    ts = time.time() if ts is None else ts
    return time.strftime("%Y-%m-%dT%H-%M-%S", time.localtime(ts))


def tokens_path(output_dir: Union[str, Path], stamp: str) -> Path:
    return Path(output_dir) / f"tokens-{stamp}.txt"


def records_path(output_dir: Union[str, Path], stamp: str) -> Path:
    return Path(output_dir) / f"records-{stamp}.txt"


def write_tokens_file(tokens: Iterable[str], path: Union[str, Path]) -> Path:
    """Write the issued tokens, one per line. Errors propagate: startup must not continue without this file."""
    path = Path(path)
    ordered = sorted(tokens)
    with open(path, "w", encoding="utf-8") as f:
        for t in ordered:
            f.write(t + "\n")
    print(f"[tokens] wrote {len(ordered)} tokens to {path}")
    return path
