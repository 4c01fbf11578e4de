#!/usr/bin/env python3
"""
MCP Server for the Guru knowledge base API - STDIO Transport

Exposes Guru cards, collections and groups as MCP tools. Credentials come from
GURU_EMAIL and GURU_API_TOKEN (environment or .env); the server refuses to
start without them.
"""

import logging
import sys
from typing import Annotated, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .api_client import GuruClient
from .config import Config, config
from .errors import ConfigurationError
from .mcp_tools import (
    DEFAULT_MAX_RESULTS,
    execute_create_card,
    execute_delete_card,
    execute_get_card,
    execute_list_cards,
    execute_list_collections,
    execute_list_groups,
    execute_set_verifier,
    execute_update_card,
    execute_verify_card,
)
from .models import ToolResult

logger = logging.getLogger(__name__)

mcp = FastMCP("guru")

api_client: GuruClient | None = None

TOOL_NAMES = (
    "list_cards",
    "get_card",
    "update_card",
    "verify_card",
    "create_card",
    "delete_card",
    "set_verifier",
    "list_groups",
    "list_collections",
)

CardId = Annotated[str, Field(description="The Guru card ID")]
NextPageUrl = Annotated[str | None, Field(description="URL for the next page of results (from previous response)")]


def _log_stderr(message: str) -> None:
    """Print to stderr (stdout is JSON-RPC only)."""
    print(message, file=sys.stderr, flush=True)


def initialize_server(settings: Config | None = None) -> GuruClient:
    """
    Validate configuration and create the Guru API client

    Raises:
        ConfigurationError: If credentials are missing
    """
    global api_client

    settings = settings or config
    settings.require_valid()
    api_client = GuruClient(
        base_url=settings.guru_api_base_url,
        email=settings.guru_email,
        token=settings.guru_api_token,
        timeout=settings.request_timeout,
    )
    logger.info(f"👤 Guru API client ready for {api_client.email} at {api_client.base_url}")
    return api_client


def _get_api_client() -> GuruClient:
    if api_client is None:
        return initialize_server()
    return api_client


def _reply(result: ToolResult) -> str:
    """Hand a handler result to FastMCP; error results become isError replies with the same text."""
    if result.is_error:
        raise ToolError(result.text)
    return result.text


@mcp.tool()
async def list_cards(
    searchTerms: Annotated[str | None, Field(description="Search terms to match against card title and content")] = None,
    verificationState: Annotated[
        Literal["trusted", "needsVerification"] | None, Field(description="Filter by verification status")
    ] = None,
    collectionId: Annotated[str | None, Field(description="Filter by board/collection ID")] = None,
    verifierId: Annotated[
        str | list[str] | None,
        Field(description="Filter by verifier email(s) or group ID(s). Cards matching ANY of the provided verifiers are returned."),
    ] = None,
    maxResults: Annotated[int, Field(ge=1, le=50, description="Max results per page (1-50)")] = DEFAULT_MAX_RESULTS,
    sortField: Annotated[str | None, Field(description="Field to sort by (e.g. lastModified, verificationState, title)")] = None,
    sortOrder: Annotated[Literal["asc", "desc"] | None, Field(description="Sort direction")] = None,
    nextPageUrl: NextPageUrl = None,
) -> str:
    """
    List Guru cards with optional filtering by collection, verification status, and search terms.

    Returns up to 50 cards per page with pagination support. Pass the returned
    nextPageUrl back to fetch the following page; other filters are ignored then.
    """
    verifier_ids = [verifierId] if isinstance(verifierId, str) else verifierId
    result = await execute_list_cards(
        _get_api_client(),
        search_terms=searchTerms,
        verification_state=verificationState,
        collection_id=collectionId,
        verifier_ids=verifier_ids,
        max_results=maxResults,
        sort_field=sortField,
        sort_order=sortOrder,
        next_page_url=nextPageUrl,
    )
    return _reply(result)


@mcp.tool()
async def get_card(cardId: CardId) -> str:
    """Get the full content and metadata of a single Guru card by its ID."""
    return _reply(await execute_get_card(_get_api_client(), cardId))


@mcp.tool()
async def update_card(
    cardId: CardId,
    title: Annotated[str | None, Field(description="New title for the card")] = None,
    content: Annotated[str | None, Field(description="New HTML content for the card")] = None,
) -> str:
    """Update a Guru card's content or title. Provide only the fields you want to change."""
    return _reply(await execute_update_card(_get_api_client(), cardId, title=title, content=content))


@mcp.tool()
async def verify_card(cardId: CardId) -> str:
    """Mark a Guru card as verified, resetting its verification timer."""
    return _reply(await execute_verify_card(_get_api_client(), cardId))


@mcp.tool()
async def create_card(
    title: Annotated[str, Field(description="Title of the new card")],
    content: Annotated[str, Field(description="HTML content of the new card")],
    collectionId: Annotated[str, Field(description="ID of the collection the card belongs to")],
    shareStatus: Annotated[Literal["TEAM", "PRIVATE", "PUBLIC"], Field(description="Who can see the card")] = "TEAM",
    boardIds: Annotated[list[str] | None, Field(description="Boards to add the card to")] = None,
) -> str:
    """Create a new Guru card in a collection."""
    result = await execute_create_card(
        _get_api_client(),
        title=title,
        content=content,
        collection_id=collectionId,
        share_status=shareStatus,
        board_ids=boardIds,
    )
    return _reply(result)


@mcp.tool()
async def delete_card(cardId: CardId) -> str:
    """Delete a Guru card by its ID."""
    return _reply(await execute_delete_card(_get_api_client(), cardId))


@mcp.tool()
async def set_verifier(
    cardId: CardId,
    verifierId: Annotated[str, Field(description="Verifier e-mail (user) or group ID (user-group)")],
    verifierType: Annotated[Literal["user", "user-group"], Field(description="Kind of verifier")] = "user",
) -> str:
    """Assign the verifier responsible for keeping a Guru card accurate."""
    result = await execute_set_verifier(_get_api_client(), cardId, verifier_id=verifierId, verifier_type=verifierType)
    return _reply(result)


@mcp.tool()
async def list_groups(nextPageUrl: NextPageUrl = None) -> str:
    """List Guru user groups (usable as card verifiers)."""
    return _reply(await execute_list_groups(_get_api_client(), next_page_url=nextPageUrl))


@mcp.tool()
async def list_collections(nextPageUrl: NextPageUrl = None) -> str:
    """List Guru collections. Use a collection ID with list_cards or create_card."""
    return _reply(await execute_list_collections(_get_api_client(), next_page_url=nextPageUrl))


def main() -> None:
    # Send all logs to stderr (stdout is for JSON-RPC only!)
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # Suppress noisy MCP library logs
    logging.getLogger("mcp.server.lowlevel.server").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        initialize_server()
    except ConfigurationError as e:
        _log_stderr("❌ Configuration errors:")
        for error in e.errors:
            _log_stderr(f"  - {error}")
        _log_stderr("GURU_EMAIL and GURU_API_TOKEN environment variables are required")
        sys.exit(1)

    try:
        _log_stderr("=" * 60)
        _log_stderr("🚀 Guru MCP Server (Stdio Mode)")
        _log_stderr("=" * 60)
        _log_stderr(f"Available tools: {len(TOOL_NAMES)}")
        _log_stderr("\n✓ Starting server on stdio...")
        _log_stderr("=" * 60 + "\n")

        mcp.run()

    except KeyboardInterrupt:
        _log_stderr("\n\nShutting down server...")
        sys.exit(0)
    except Exception as e:
        _log_stderr(f"\n❌ Error: {e}")
        import traceback

        traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
