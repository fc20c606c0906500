from loguru import logger
from starlette.websockets import WebSocket, WebSocketState

from signal_relay.utils.relay_errors import ChannelClosedError


class WebSocketChannel:
    """Connection channel backed by a Starlette websocket.

    Once a write fails or the channel is closed, every later ``send``
    raises ``ChannelClosedError`` without touching the socket.
    """

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket
        self.closed = False

    async def send(self, payload: str) -> None:
        if self.closed or self._websocket.application_state != WebSocketState.CONNECTED:
            raise ChannelClosedError()
        try:
            await self._websocket.send_text(payload)
        except Exception:
            self.closed = True
            raise

    async def close(self, code: int = 1000) -> None:
        """Stop accepting writes and close the socket if the peer is still there."""
        if self.closed:
            return
        self.closed = True

        if (
            self._websocket.application_state != WebSocketState.CONNECTED
            or self._websocket.client_state != WebSocketState.CONNECTED
        ):
            return
        try:
            await self._websocket.close(code)
        except Exception as exc:
            logger.debug("Websocket close failed: {}: {}", type(exc).__name__, exc)
