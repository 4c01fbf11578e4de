"""
Guru MCP Server
A Model Context Protocol server for the Guru knowledge base API
"""

__version__ = "1.0.0"

from .api_client import GuruClient
from .config import config
from .errors import ConfigurationError, UpstreamError
from .models import GuruFailure, GuruPage, ToolResult
from .server_stdio import mcp

__all__ = [
    "mcp",
    "GuruClient",
    "config",
    "ConfigurationError",
    "UpstreamError",
    "GuruFailure",
    "GuruPage",
    "ToolResult",
]
