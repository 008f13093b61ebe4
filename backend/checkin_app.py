from __future__ import annotations
import argparse
import os
import sys
import time
from typing import Optional, List

import uvicorn
from fastapi import FastAPI, Request
from dotenv import load_dotenv

from checkin_errors import CheckinError
from checkin_flow import CheckinConfig, CheckinState
from checkin_pages import render_message
from checkin_routes import create_checkin_router
from checkin_store import RecordWriter, TokenStore
from checkin_issuance import issue_tokens, records_path, run_stamp, tokens_path, write_tokens_file
from checkin_rate_limit import RateLimiter

# Load environment variables from .env file
load_dotenv()

# ---------------------------
# Config
# ---------------------------
TOKEN_COUNT = int(os.getenv("CHECKIN_TOKENS", "50"))          # tokens issued at startup
PORT = int(os.getenv("CHECKIN_PORT", "8888"))
HOST = os.getenv("CHECKIN_HOST", "0.0.0.0")
OUTPUT_DIR = os.getenv("CHECKIN_OUTPUT_DIR", ".")             # where tokens-*.txt / records-*.txt go
RATE_WINDOW_SEC = int(os.getenv("RATE_WINDOW_SEC", "10"))     # min gap between token attempts per IP
CONFIRM_DELAY_SEC = int(os.getenv("CONFIRM_DELAY_SEC", "3"))  # confirm button stays disabled this long


# ---------------------------
# Bootstrap
# ---------------------------
def build_state(config: CheckinConfig, ts: Optional[float] = None) -> CheckinState:
    """
    Issue the token pool and write it to disk before anything is served.

    Any failure here (bad output dir, unwritable tokens file) propagates and
    aborts startup; there is no partial start.
    """
    stamp = run_stamp(ts)
    print(f"[startup] Start time: {stamp}")

    os.makedirs(config.output_dir, exist_ok=True)
    tokens = issue_tokens(config.token_count)
    write_tokens_file(tokens, tokens_path(config.output_dir, stamp))

    writer = RecordWriter(records_path(config.output_dir, stamp))
    return CheckinState(
        store=TokenStore(tokens, writer),
        limiter=RateLimiter(),
        config=config,
    )


# ---------------------------
# App
# ---------------------------
def create_app(state: CheckinState) -> FastAPI:
    app = FastAPI(title="Token check-in", docs_url=None, redoc_url=None)

    @app.exception_handler(CheckinError)
    async def _checkin_error(req: Request, exc: CheckinError):
        return render_message(exc.message, nav=exc.nav, status_code=exc.status_code)

    app.include_router(create_checkin_router(state))
    return app


def parse_args(argv: Optional[List[str]] = None) -> CheckinConfig:
    ap = argparse.ArgumentParser(description="Single-use token check-in server")
    ap.add_argument("--tokens", type=int, default=TOKEN_COUNT,
                    help="Number of tokens to issue at startup (or set CHECKIN_TOKENS)")
    ap.add_argument("--port", type=int, default=PORT, help="Listening port (or set CHECKIN_PORT)")
    ap.add_argument("--host", default=HOST, help="Listening address (or set CHECKIN_HOST)")
    ap.add_argument("--output-dir", default=OUTPUT_DIR,
                    help="Directory for tokens-*.txt and records-*.txt (or set CHECKIN_OUTPUT_DIR)")
    ap.add_argument("--rate-window", type=int, default=RATE_WINDOW_SEC,
                    help="Seconds a client must wait between token attempts (or set RATE_WINDOW_SEC)")
    ap.add_argument("--confirm-delay", type=int, default=CONFIRM_DELAY_SEC,
                    help="Seconds the confirm button stays disabled (or set CONFIRM_DELAY_SEC)")
    args = ap.parse_args(argv)

    if not 0 <= args.port <= 65535:
        ap.error(f"invalid port: {args.port}")
    if args.tokens < 0:
        ap.error("--tokens must not be negative")
    if args.rate_window < 0 or args.confirm_delay < 0:
        ap.error("--rate-window and --confirm-delay must not be negative")

    return CheckinConfig(
        token_count=args.tokens,
        host=args.host,
        port=args.port,
        output_dir=args.output_dir,
        rate_window_sec=args.rate_window,
        confirm_delay_sec=args.confirm_delay,
    )


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_args(argv)
    try:
        state = build_state(config, time.time())
    except (OSError, ValueError) as e:
        print(f"ERROR: startup failed: {e}", file=sys.stderr)
        return 1

    app = create_app(state)
    print(f"[startup] Listening on http://{config.host}:{config.port}")
    # A bind failure makes uvicorn exit the process; there is nothing to recover.
    uvicorn.run(app, host=config.host, port=config.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
