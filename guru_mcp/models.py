"""
Pydantic models and result types shared by the client and the tools
"""

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextContent(BaseModel):
    """A single text segment of a tool result"""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Tool call result (compatible with MCP CallToolResult)"""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def success(cls, payload: Any) -> "ToolResult":
        """Wrap a JSON-serialisable payload as pretty-printed text."""
        return cls(content=[TextContent(text=json.dumps(payload, indent=2))])

    @classmethod
    def failure(cls, action: str, message: str) -> "ToolResult":
        return cls(content=[TextContent(text=f"Error {action}: {message}")], is_error=True)

    @property
    def text(self) -> str:
        return self.content[0].text


@dataclass(frozen=True)
class GuruPage:
    """Successful Guru API response: parsed JSON body and the next-page cursor, if any"""

    payload: Any
    next_url: str | None = None


@dataclass(frozen=True)
class GuruFailure:
    """Failed Guru API call (HTTP error status, network failure or malformed JSON)"""

    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


GuruResult = GuruPage | GuruFailure
