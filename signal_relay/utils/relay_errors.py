"""Error codes and the application exception for the signaling relay."""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class RelayErrorCode(str, Enum):
    """Stable error codes surfaced in logs and HTTP failure envelopes."""

    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_SERVICE_UNAVAILABLE = "E_SERVICE_UNAVAILABLE"

    # Inbound websocket frames
    E_MESSAGE_INVALID_JSON = "E_MESSAGE_INVALID_JSON"
    E_MESSAGE_NOT_OBJECT = "E_MESSAGE_NOT_OBJECT"
    E_MESSAGE_MISSING_TYPE = "E_MESSAGE_MISSING_TYPE"
    E_MESSAGE_VALIDATION_ERROR = "E_MESSAGE_VALIDATION_ERROR"

    # Outbound delivery
    E_SEND_FAILED = "E_SEND_FAILED"
    E_CHANNEL_CLOSED = "E_CHANNEL_CLOSED"

    def __str__(self) -> str:
        return self.value


class RelayStatusCode(IntEnum):
    INTERNAL_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class RelayError(Exception):
    """Application error carrying an error code, a correlation id and the raise site."""

    def __init__(
        self,
        errcode: RelayErrorCode | str = RelayErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        *,
        status_code: int = RelayStatusCode.INTERNAL_ERROR,
    ):
        self.errcode = errcode.value if isinstance(errcode, RelayErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.erresid = uuid4().hex[:10]
        self.status_code = int(status_code)

        caller_frame = inspect.stack(0)[1]
        module = inspect.getmodule(caller_frame.frame)
        module_name = (
            module.__name__ if module and getattr(module, "__name__", None) else caller_frame.filename
        )
        self.caller_info = f"{module_name}:{caller_frame.function}:{caller_frame.lineno}"

        super().__init__(f"{self.errcode}: {errmesg}")


class ChannelClosedError(RelayError):
    """Raised by a connection channel written to after it has gone away."""

    def __init__(self, errmesg: str = "Channel is closed"):
        super().__init__(
            RelayErrorCode.E_CHANNEL_CLOSED,
            errmesg,
            status_code=RelayStatusCode.SERVICE_UNAVAILABLE,
        )
