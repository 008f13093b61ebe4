# checkin_routes.py
from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from checkin_flow import CheckinState, collect_identifier, confirm, validate_token
from checkin_pages import (
    render_confirm_form,
    render_student_id_form,
    render_success,
    render_token_form,
)


class StatusOut(BaseModel):
    remaining: int
    used: int
    rate_window_sec: int


def get_client_ip(req: Request) -> str:
    # NOTE: behind a reverse proxy every client shares the proxy address (and NAT users share one anyway).
    return req.client.host if req.client else "unknown"


def create_checkin_router(state: CheckinState) -> APIRouter:
    router = APIRouter()

    @router.get("/", response_class=HTMLResponse)
    def show_token_form():
        return render_token_form()

    @router.post("/", response_class=HTMLResponse)
    def check_token(req: Request, token: str = Form("")):
        token = validate_token(state, get_client_ip(req), token)
        return render_student_id_form(token)

    @router.post("/id", response_class=HTMLResponse)
    def enter_id(student_id: str = Form(""), token: str = Form("")):
        token, student_id = collect_identifier(token, student_id)
        return render_confirm_form(token, student_id, state.config.confirm_delay_sec)

    @router.post("/confirm", response_class=HTMLResponse)
    def confirm_id(student_id: str = Form(""), token: str = Form("")):
        confirm(state, token, student_id)
        return render_success()

    @router.get("/status", response_model=StatusOut)
    def status():
        return StatusOut(
            remaining=state.store.pool_size(),
            used=state.store.used_count(),
            rate_window_sec=state.config.rate_window_sec,
        )

    return router
