# client_checkin_demo.py
#
# Minimal Python client to walk through a check-in:
#   1) POST /         token       -> student id form
#   2) POST /id       student id  -> confirmation form
#   3) POST /confirm  both        -> sign-in recorded
#
# Requirements:
#   pip install requests
#
# Usage:
#   python client_checkin_demo.py <token> <student_id>

import os
import re
import sys
import time

import requests
from dotenv import load_dotenv

load_dotenv()

# ---------------------------
# Config
# ---------------------------
BASE_URL = os.getenv("CHECKIN_BASE_URL", "http://127.0.0.1:8888")
CONFIRM_DELAY_SEC = int(os.getenv("CONFIRM_DELAY_SEC", "3"))  # mirror the server's button delay
VERBOSE = True

_MESSAGE_RE = re.compile(r"<h[12]>(.*?)</h[12]>", re.S)


def page_message(html: str) -> str:
    """Return the first heading of a rendered page (the message or form title)."""
    m = _MESSAGE_RE.search(html or "")
    return m.group(1).strip() if m else ""


# ---------------------------
# API calls
# ---------------------------
def post_step(session: requests.Session, path: str, data: dict) -> str:
    r = session.post(f"{BASE_URL}{path}", data=data, timeout=30)
    msg = page_message(r.text)
    if VERBOSE:
        print(f"[{path}] {r.status_code} {msg}")
    if r.status_code != 200:
        raise RuntimeError(f"{path} failed {r.status_code}: {msg}")
    return msg


def check_in(token: str, student_id: str) -> str:
    with requests.Session() as session:
        post_step(session, "/", {"token": token})
        post_step(session, "/id", {"student_id": student_id, "token": token})
        # The browser keeps the confirm button disabled for a moment; do the same.
        time.sleep(CONFIRM_DELAY_SEC)
        return post_step(session, "/confirm", {"student_id": student_id, "token": token})


# ---------------------------
# Demo main
# ---------------------------
def main() -> int:
    if len(sys.argv) != 3:
        print("usage: client_checkin_demo.py <token> <student_id>", file=sys.stderr)
        return 2
    try:
        print("[checkin]", check_in(sys.argv[1], sys.argv[2]))
    except (RuntimeError, requests.RequestException) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
