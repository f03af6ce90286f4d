"""Plugin configuration model.

The host hands the plugin a single config string at init time. An empty
string selects the defaults; anything else must be a JSON object matching
PluginConfig.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cloudtrail_source.core.domain.errors import ConfigError

MAX_EVENT_BYTES = 65535
DEFAULT_OUT_BUF_LEN = 4096


class PluginConfig(BaseModel):
    """Init-time settings.

    JSON example:
        {"verbose": true, "max_record_bytes": 32768}
    """

    verbose: bool = False
    max_record_bytes: int = Field(default=MAX_EVENT_BYTES, ge=1, le=MAX_EVENT_BYTES)
    out_buf_len: int = Field(default=DEFAULT_OUT_BUF_LEN, ge=16)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> PluginConfig:
        """Create a PluginConfig from a JSON-compatible object."""
        return cls.model_validate(obj)

    @classmethod
    def from_config_string(cls, raw: str | None) -> PluginConfig:
        """Parse the host's init string, mapping every failure to ConfigError."""
        if raw is None or not raw.strip():
            return cls()

        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid plugin config: {exc}") from exc

        if not isinstance(obj, dict):
            raise ConfigError("invalid plugin config: expected a JSON object")

        try:
            return cls.from_json_obj(obj)
        except ValidationError as exc:
            raise ConfigError(f"invalid plugin config: {exc}") from exc
