"""Input limits for the plan loader."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

_BYTES_PER_MB = 1024 * 1024


class ParserConfig(BaseModel):
    """
    Limits applied to every plan input, whether it arrives as a file,
    text, or raw bytes from stdin.

    Attributes:
        max_input_size_mb: Largest accepted input, measured in UTF-8 bytes.
        max_nodes: Largest accepted number of plan nodes.
    """

    model_config = ConfigDict(frozen=True)

    max_input_size_mb: float = Field(default=100.0, gt=0)
    max_nodes: int = Field(default=50_000, gt=0)

    @property
    def max_input_bytes(self) -> int:
        return int(self.max_input_size_mb * _BYTES_PER_MB)


DEFAULT_CONFIG = ParserConfig()
