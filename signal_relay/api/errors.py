from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from signal_relay.shared.api.utils import ApiFailure, make_response
from signal_relay.utils.relay_errors import RelayError, RelayErrorCode


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """
    Custom exception handler for RelayError.
    Converts RelayError to ApiFailure and returns via make_response.
    """
    # Log with the caller info captured when RelayError was raised
    log_msg = f"{exc.errcode} {exc.erresid} msg={exc.errmesg} caller={exc.caller_info}"
    if exc.errcode == RelayErrorCode.E_INTERNAL_ERROR.value:
        logger.error(log_msg)
    else:
        logger.warning(log_msg)

    failure = ApiFailure(errcode=exc.errcode, errmesg=exc.errmesg, erresid=exc.erresid)
    return make_response(failure, status_code=exc.status_code)
