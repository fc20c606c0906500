from typing import Any

from fastapi import APIRouter, Request

from signal_relay.domain.signaling.router import SignalingRouter
from signal_relay.shared.api.utils import ApiSuccess
from signal_relay.utils.relay_errors import RelayError, RelayErrorCode, RelayStatusCode

router = APIRouter(prefix="/broadcasters", tags=["Broadcasters"])


class BroadcasterListSuccess(ApiSuccess):
    results: list[dict[str, Any]]  # type: ignore[assignment]


def _signaling_router(request: Request) -> SignalingRouter:
    signaling = getattr(request.app.state, "signaling_router", None)
    if signaling is None:
        raise RelayError(
            errcode=RelayErrorCode.E_SERVICE_UNAVAILABLE,
            errmesg="Signaling router is not running",
            status_code=RelayStatusCode.SERVICE_UNAVAILABLE,
        )
    return signaling


@router.get("", response_model=BroadcasterListSuccess)
async def list_broadcasters(request: Request) -> BroadcasterListSuccess:
    """Current broadcaster directory, in the same shape clients receive over the socket."""
    signaling = _signaling_router(request)
    entries = signaling.directory.snapshot()
    return BroadcasterListSuccess(results=[entry.model_dump(by_alias=True) for entry in entries])
