from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from .models import CodeRequest, StatsModel
from .state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


def _state(request: Request) -> AppState:
    state: AppState = request.app.state.app_state
    return state


@router.post("/code")
async def code(request: Request, body: CodeRequest) -> Response:
    """Encode a segment into Hamming(15,11) frames and push it through the channel.

    Each frame gets a bit flipped with the configured probability, errors are
    corrected, frames are decoded back into the segment and the result is
    forwarded to the transfer service. The whole segment may be lost.
    Processing continues after this handler returns.
    """
    _state(request).forwarder.submit(body)
    return Response(status_code=200, media_type=request.headers.get("content-type"))


@router.get("/stats", response_model=StatsModel)
def stats(request: Request) -> StatsModel:
    return StatsModel(**_state(request).stats.snapshot().to_dict())


async def request_validation_handler(request: Request, exc: Exception) -> Response:
    if isinstance(exc, RequestValidationError):
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
    else:
        detail = str(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, detail)
    return PlainTextResponse(f"Can't read request body:{detail}", status_code=400)
