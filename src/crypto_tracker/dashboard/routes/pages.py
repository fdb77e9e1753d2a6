"""Page routes: the ranked coin list at / and coin detail at /crypto/{id}.

Every page load mounts the browser's view, which triggers a fresh fetch and
renders whatever state the newest fetch settled in.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from crypto_tracker.dashboard.views import SessionRegistry, ViewSession, sort_by_rank
from crypto_tracker.exceptions import CoinNotFoundError
from crypto_tracker.logging import bind_request_context, get_logger

log = get_logger(__name__)

router = APIRouter()

SESSION_COOKIE = "tracker_session"


def _session(request: Request, **log_fields: str) -> ViewSession:
    registry: SessionRegistry = request.app.state.sessions
    session = registry.get(request.cookies.get(SESSION_COOKIE))
    bind_request_context(session_id=session.session_id, **log_fields)
    return session


def _with_session_cookie(response: HTMLResponse, session: ViewSession) -> HTMLResponse:
    response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


@router.get("/", response_class=HTMLResponse)
async def coin_list(request: Request, order: str = "asc") -> HTMLResponse:
    """List view: top coins by market cap, sortable by rank."""
    templates: Jinja2Templates = request.app.state.templates
    session = _session(request)

    state = await session.list_view.mount()
    descending = order == "desc"
    coins = sort_by_rank(state.value or [], descending=descending)

    response = templates.TemplateResponse(
        request,
        "index.html",
        {
            "state": state,
            "coins": coins,
            "descending": descending,
            "page_size": session.list_view.query.page_size,
            "currency": request.app.state.currency.upper(),
        },
    )
    return _with_session_cookie(response, session)


@router.get("/crypto/{coin_id}", response_class=HTMLResponse)
async def coin_detail(request: Request, coin_id: str) -> HTMLResponse:
    """Detail view for one coin, or the not-found page."""
    templates: Jinja2Templates = request.app.state.templates
    session = _session(request, coin_id=coin_id)
    currency = request.app.state.currency.upper()

    state = await session.detail_view.show(coin_id)

    if state.error_code == CoinNotFoundError.code:
        log.info("coin_not_found", coin_id=coin_id)
        response = templates.TemplateResponse(
            request,
            "not_found.html",
            {"coin_id": coin_id, "currency": currency},
            status_code=404,
        )
        return _with_session_cookie(response, session)

    response = templates.TemplateResponse(
        request,
        "detail.html",
        {"state": state, "coin": state.value, "coin_id": coin_id, "currency": currency},
    )
    return _with_session_cookie(response, session)
