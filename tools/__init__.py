# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP-facing layer.
#
#   mcp_server.py  FastMCP instance, the three forecast tools, request logging
#   results.py     payload → ToolResult (structured content + JSON text mirror)
#
# Tools hold no state.  They do not catch ForecastError: FastMCP reports it
# to the caller as a failed tool call.
# =============================================================================
