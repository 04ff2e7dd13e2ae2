"""
Package-level exception hierarchy for spannerplan.

All exceptions inherit from SpannerPlanError, enabling:
- Catching all spannerplan errors with a single except clause
- Rich context fields for debugging (node_index, fragment, config_key, etc.)
- Structured serialization via to_dict() for JSON error output

Hierarchy:
    SpannerPlanError
    ├── ConstructionError      – Plan node list cannot form a QueryPlan
    │   ├── EmptyPlanError     – No plan nodes at all
    │   └── PlanIndexError     – Declared index differs from list position
    ├── EncodingError          – Tree payload could not be encoded
    ├── DecodeError            – Rendered tree record is malformed
    ├── StatsDecodeError       – Execution stats payload rejected
    ├── ConfigurationError     – Invalid render configuration
    │   └── FormatParseError   – Unknown enumerated option value
    └── ParseError             – Failed to load plan input
"""

from __future__ import annotations

from typing import Any


class SpannerPlanError(Exception):
    """
    Base exception for all spannerplan errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Construction Errors ──────────────────────────────────────────────────


class ConstructionError(SpannerPlanError):
    """A QueryPlan could not be built from the given plan nodes."""
    pass


class EmptyPlanError(ConstructionError):
    """Raised when the plan node list is empty."""

    def __init__(self, message: str = "plan nodes cannot be empty") -> None:
        super().__init__(message)


class PlanIndexError(ConstructionError):
    """
    A plan node's declared index does not match its list position.

    Attributes:
        position: Position of the node in the plan node list.
        declared_index: The index the node claims.
    """

    def __init__(self, position: int, declared_index: int) -> None:
        self.position = position
        self.declared_index = declared_index
        super().__init__(
            f"plan node at position {position} declares index {declared_index}"
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["position"] = self.position
        result["declared_index"] = self.declared_index
        return result


# ── Tree Encoding / Decoding Errors ──────────────────────────────────────


class EncodingError(SpannerPlanError):
    """
    A node title or child link could not be encoded into a tree payload.

    Attributes:
        node_index: Index of the node being linearized (if known).
    """

    def __init__(self, message: str, node_index: int | None = None) -> None:
        self.node_index = node_index
        if node_index is not None:
            message = f"node {node_index}: {message}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["node_index"] = self.node_index
        return result


class DecodeError(SpannerPlanError):
    """
    A record of the rendered tree could not be decoded.

    Attributes:
        fragment: The raw record that failed to decode.
    """

    def __init__(self, message: str, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"{message}, tree line = {fragment!r}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["fragment"] = self.fragment
        return result


class StatsDecodeError(SpannerPlanError):
    """
    Execution stats of a node could not be decoded.

    Attributes:
        node_index: Index of the node whose stats were rejected.
        fields: Offending field locations, when known.
    """

    def __init__(
        self,
        message: str,
        node_index: int | None = None,
        fields: list[str] | None = None,
    ) -> None:
        self.node_index = node_index
        self.fields = fields or []
        if node_index is not None:
            message = f"node {node_index}: {message}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["node_index"] = self.node_index
        result["fields"] = list(self.fields)
        return result


# ── Configuration Errors ─────────────────────────────────────────────────


class ConfigurationError(SpannerPlanError):
    """
    Error in render configuration.

    Attributes:
        config_key: The configuration key that caused the error (if known).
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result


class FormatParseError(ConfigurationError):
    """
    An enumerated option string is not one of the accepted values.

    Attributes:
        value: The rejected input string.
        expected: Accepted values.
    """

    def __init__(
        self,
        config_key: str,
        value: str,
        expected: list[str],
    ) -> None:
        self.value = value
        self.expected = expected
        super().__init__(
            f"invalid {config_key}, expect {' or '.join(expected)}: {value}",
            config_key=config_key,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value"] = self.value
        result["expected"] = list(self.expected)
        return result


# ── Parse Errors ─────────────────────────────────────────────────────────


class ParseError(SpannerPlanError):
    """
    Failed to load plan input.

    Raised when the input is not valid YAML/JSON, does not contain a query
    plan, is too large, or fails model validation.

    Attributes:
        detail: Technical details for debugging (optional).
        source: Stage where the error occurred (e.g., "yaml_decode").
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        source: str = "unknown",
    ) -> None:
        self.detail = detail
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n\nDetails: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["source"] = self.source
        result["detail"] = self.detail
        return result
