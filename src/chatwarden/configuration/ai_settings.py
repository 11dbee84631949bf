import os
from typing import Any, Dict

from chatwarden.util.logger import get_logger

logger = get_logger("app_configuration")

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL_NAME = "gpt-5-mini"


def coerce_number(data: Dict[str, Any], key: str, default: float, *, minimum: float = 0, cast=int):
    """Read ``data[key]`` through ``cast``, falling back to ``default`` when missing or invalid.

    Values below ``minimum`` are treated as invalid as well.
    """
    raw = data.get(key, default)
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        value = None
    if value is None or value < minimum:
        logger.warning(
            "[APP CONFIGURATION] Invalid value %r for %s; using default %r", raw, key, default
        )
        return cast(default)
    return value


class AISettings:
    """Typed accessors for the oracle (OpenAI-compatible API) configuration.

    Like the other settings wrappers this exposes ``get``/``as_dict`` plus
    convenience properties, and never raises on bad input.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return the underlying mapping (shallow copy recommended by callers)."""
        return self.data

    @property
    def api_key(self) -> str | None:
        """API key from the config file, else the ``OPENAI_API_KEY`` environment variable."""
        val = self.data.get("api_key") or os.getenv("OPENAI_API_KEY")
        return str(val) if val else None

    @property
    def base_url(self) -> str:
        return str(self.data.get("base_url") or DEFAULT_BASE_URL)

    @property
    def model_name(self) -> str:
        return str(self.data.get("model_name") or DEFAULT_MODEL_NAME)

    @property
    def request_timeout_seconds(self) -> float:
        return coerce_number(self.data, "request_timeout_seconds", 10.0, minimum=0.1, cast=float)

    @property
    def worker_count(self) -> int:
        return coerce_number(self.data, "worker_count", 2, minimum=1)

    @property
    def tokens_per_verdict(self) -> int:
        return coerce_number(self.data, "tokens_per_verdict", 2, minimum=1)

    @property
    def language(self) -> str | None:
        val = self.data.get("language")
        return str(val) if val else None
