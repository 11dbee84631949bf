from typing import Any, Dict

from chatwarden.configuration.ai_settings import coerce_number

DEFAULT_FORBIDDEN_PREFIX = "/prompt"


class ModerationSettings:
    """Typed accessors for the ``moderation`` section of the app configuration."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def batch_size(self) -> int:
        """Flush threshold; ``scan_every_x_messages`` is accepted as a legacy alias."""
        if "batch_size" not in self.data and "scan_every_x_messages" in self.data:
            return coerce_number(self.data, "scan_every_x_messages", 5, minimum=1)
        return coerce_number(self.data, "batch_size", 5, minimum=1)

    @property
    def max_message_length(self) -> int:
        return coerce_number(self.data, "max_message_length", 200, minimum=1)

    @property
    def mute_minutes(self) -> float:
        return coerce_number(self.data, "mute_minutes", 15.0, minimum=0, cast=float)

    @property
    def forbidden_prefix(self) -> str:
        val = self.data.get("forbidden_prefix", DEFAULT_FORBIDDEN_PREFIX)
        return str(val) if val is not None else ""

    @property
    def delete_bad_messages(self) -> bool:
        return bool(self.data.get("delete_bad_messages", True))

    @property
    def max_messages_per_day(self) -> int:
        """Daily oracle scan budget; 0 disables the cap."""
        return coerce_number(self.data, "max_messages_per_day", 1000, minimum=0)

    @property
    def shutdown_grace_seconds(self) -> float:
        return coerce_number(self.data, "shutdown_grace_seconds", 5.0, minimum=0, cast=float)
