"""Open-time parameters: the directory to read CloudTrail files from."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cloudtrail_source.core.domain.errors import ConfigError
from cloudtrail_source.core.domain.metadata import PLUGIN_NAME


class OpenParams(BaseModel):
    root_dir: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_params(cls, params: str | None) -> OpenParams:
        """Build from the raw open string. Empty means no directory was given."""
        try:
            return cls(root_dir=params or "")
        except ValidationError as exc:
            raise ConfigError(
                f"{PLUGIN_NAME} plugin error: missing input directory argument"
            ) from exc

    @property
    def root_path(self) -> Path:
        return Path(self.root_dir)
