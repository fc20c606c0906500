"""Websocket endpoint that feeds client frames into the signaling router."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from signal_relay.app_config import get_app_environ_config
from signal_relay.domain.signaling.router import SignalingRouter

from .channel import WebSocketChannel

router = APIRouter(tags=["Signaling"])


def get_signaling_router(websocket: WebSocket) -> SignalingRouter:
    return websocket.app.state.signaling_router


async def serve_signaling(websocket: WebSocket) -> None:
    signaling = get_signaling_router(websocket)

    await websocket.accept()
    channel = WebSocketChannel(websocket)
    session = await signaling.connect(channel)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            payload = frame.get("text")
            if payload is None:
                payload = frame.get("bytes")
            if payload is None:
                continue

            await signaling.handle(session.id, payload)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Signaling loop for {} failed", session.id)
    finally:
        await channel.close()
        await signaling.disconnect(session.id)


router.add_api_websocket_route(get_app_environ_config().WS_PATH, serve_signaling)
