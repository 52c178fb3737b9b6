# =============================================================================
# tools/results.py  —  Forecast → MCP tool result
# =============================================================================
#
# Every successful tool call returns the same payload twice:
#   - structured_content: the payload as a JSON object (for typed clients)
#   - content[0].text:    that same object serialized as compact JSON
#
# The text is always produced FROM the structured dict, so
#   json.loads(content[0].text) == structured_content
# holds for every result this module builds.
# =============================================================================

import json

from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from core.nws import ForecastError, ForecastPayload


def to_json(structured: dict) -> str:
    """Serialize a structured payload to compact JSON text.

    Raises:
        ForecastError: if the value cannot be represented as JSON
            (e.g. NaN/Infinity, or a non-serializable object).
    """
    try:
        return json.dumps(structured, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ForecastError(f"forecast could not be encoded as JSON: {e}") from e


def encode_forecast(payload: ForecastPayload) -> ToolResult:
    """Wrap a fetched forecast as a ToolResult with its JSON text mirror."""
    structured = payload.to_dict()
    return ToolResult(
        content=[TextContent(type="text", text=to_json(structured))],
        structured_content=structured,
    )
