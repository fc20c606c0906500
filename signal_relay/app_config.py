from pydantic import BaseModel

from signal_relay.domain.signaling.session_models import BroadcastMode
from signal_relay.shared.config import config


class AppEnvironConfig(BaseModel):
    API_HOST: str = (config.get("API_HOST") or "").strip() or "0.0.0.0"
    # Single listen port; PORT matches the convention of common hosting platforms
    PORT: int = config.get_int("PORT", 8080)
    # The registry lives in-process, so each extra worker is a separate signaling domain
    API_WORKERS: int = config.get_int("API_WORKERS", 1)
    DEBUG: bool = config.get_bool("DEBUG")

    BROADCAST_MODE: BroadcastMode = BroadcastMode.parse(config.get("BROADCAST_MODE"))
    DEFAULT_DISPLAY_NAME: str = (config.get("DEFAULT_DISPLAY_NAME") or "").strip() or "Anonymous"
    SINGLE_BROADCASTER_ERROR: str = (
        config.get("SINGLE_BROADCASTER_ERROR") or ""
    ).strip() or "A broadcaster already exists."

    # Browser client bundle served at "/"
    STATIC_DIR: str = (config.get("STATIC_DIR") or "").strip() or "public"
    WS_PATH: str = (config.get("WS_PATH") or "").strip() or "/"


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
