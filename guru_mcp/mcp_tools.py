from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .models import GuruFailure, ToolResult

if TYPE_CHECKING:
    from .api_client import GuruClient

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/query"
DEFAULT_MAX_RESULTS = 50


def _card_path(card_id: str) -> str:
    return f"/cards/{card_id}"


# ============================================================================
# Card search filter (Guru query language)
# ============================================================================


def build_card_query(
    verification_state: str | None = None,
    collection_id: str | None = None,
    verifier_ids: list[str] | None = None,
) -> str | None:
    """
    Compose the `q` filter expression for a card search.

    Each filter contributes one clause and clauses are joined with AND.
    Several verifiers are OR-ed together inside parentheses.

    Examples:
        build_card_query("trusted", "abc") -> 'verificationState = trusted AND boards CONTAINS abc'
        build_card_query(verifier_ids=["a@x.com", "b@x.com"]) -> '(verifierId = "a@x.com" OR verifierId = "b@x.com")'

    Returns:
        The expression, or None when no filter was given
    """
    clauses: list[str] = []
    if verification_state:
        clauses.append(f"verificationState = {verification_state}")
    if collection_id:
        clauses.append(f"boards CONTAINS {collection_id}")
    if verifier_ids:
        verifier_clauses = [f'verifierId = "{v}"' for v in verifier_ids]
        if len(verifier_clauses) == 1:
            clauses.append(verifier_clauses[0])
        else:
            clauses.append(f"({' OR '.join(verifier_clauses)})")
    return " AND ".join(clauses) if clauses else None


def build_card_search_path(
    search_terms: str | None = None,
    verification_state: str | None = None,
    collection_id: str | None = None,
    verifier_ids: list[str] | None = None,
    max_results: int | None = DEFAULT_MAX_RESULTS,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> str:
    """Relative URL of the first page of a card search. Search terms travel separately from the filter."""
    params: dict[str, str] = {}
    query = build_card_query(verification_state, collection_id, verifier_ids)
    if query:
        params["q"] = query
    if search_terms:
        params["searchTerms"] = search_terms
    if max_results:
        params["maxResults"] = str(max_results)
    if sort_field:
        params["sortField"] = sort_field
    if sort_order:
        params["sortOrder"] = sort_order

    query_string = urlencode(params)
    return f"{SEARCH_PATH}?{query_string}" if query_string else SEARCH_PATH


# ============================================================================
# Query tools: list_cards, list_groups, list_collections
# ============================================================================


async def _list(api_client: GuruClient, path: str, key: str, action: str) -> ToolResult:
    result = await api_client.request(path)
    if isinstance(result, GuruFailure):
        return ToolResult.failure(action, result.message)
    return ToolResult.success({key: result.payload, "nextPageUrl": result.next_url})


async def execute_list_cards(
    api_client: GuruClient,
    search_terms: str | None = None,
    verification_state: str | None = None,
    collection_id: str | None = None,
    verifier_ids: list[str] | None = None,
    max_results: int | None = DEFAULT_MAX_RESULTS,
    sort_field: str | None = None,
    sort_order: str | None = None,
    next_page_url: str | None = None,
) -> ToolResult:
    """
    Core logic for list_cards tool.

    A next_page_url from a previous response is fetched as-is; filters only
    apply to the first page.

    Returns:
        ToolResult with {"cards": [...], "nextPageUrl": str | None}
    """
    if next_page_url:
        path = next_page_url
    else:
        path = build_card_search_path(
            search_terms=search_terms,
            verification_state=verification_state,
            collection_id=collection_id,
            verifier_ids=verifier_ids,
            max_results=max_results,
            sort_field=sort_field,
            sort_order=sort_order,
        )
    return await _list(api_client, path, "cards", "listing cards")


async def execute_list_groups(api_client: GuruClient, next_page_url: str | None = None) -> ToolResult:
    """Core logic for list_groups tool."""
    return await _list(api_client, next_page_url or "/groups", "groups", "listing groups")


async def execute_list_collections(api_client: GuruClient, next_page_url: str | None = None) -> ToolResult:
    """Core logic for list_collections tool."""
    return await _list(api_client, next_page_url or "/collections", "collections", "listing collections")


# ============================================================================
# Read tool: get_card
# ============================================================================


async def execute_get_card(api_client: GuruClient, card_id: str) -> ToolResult:
    result = await api_client.request(_card_path(card_id))
    if isinstance(result, GuruFailure):
        return ToolResult.failure("getting card", result.message)
    return ToolResult.success(result.payload)


# ============================================================================
# Mutate tools
# ============================================================================


def merge_card_fields(existing: dict[str, Any] | None, title: str | None = None, content: str | None = None) -> dict[str, Any]:
    """
    Body for a card PUT: supplied values win, missing ones keep the current card's value.

    Guru stores the card title as `preferredPhrase`.
    """
    if not isinstance(existing, dict):
        existing = {}
    return {
        "preferredPhrase": title if title is not None else existing.get("preferredPhrase"),
        "content": content if content is not None else existing.get("content"),
    }


async def execute_update_card(
    api_client: GuruClient,
    card_id: str,
    title: str | None = None,
    content: str | None = None,
) -> ToolResult:
    """Core logic for update_card tool: fetch the card, merge the changes, PUT it back."""
    current = await api_client.request(_card_path(card_id))
    if isinstance(current, GuruFailure):
        return ToolResult.failure("updating card", current.message)

    body = merge_card_fields(current.payload, title=title, content=content)
    result = await api_client.request(_card_path(card_id), method="PUT", body=body)
    if isinstance(result, GuruFailure):
        return ToolResult.failure("updating card", result.message)
    return ToolResult.success(result.payload)


async def execute_verify_card(api_client: GuruClient, card_id: str) -> ToolResult:
    """Core logic for verify_card tool. Every call is sent; verification is not deduplicated."""
    result = await api_client.request(f"{_card_path(card_id)}/verify", method="PUT")
    if isinstance(result, GuruFailure):
        return ToolResult.failure("verifying card", result.message)
    payload = result.payload if result.payload is not None else {"verified": True, "cardId": card_id}
    return ToolResult.success(payload)


async def execute_create_card(
    api_client: GuruClient,
    title: str,
    content: str,
    collection_id: str,
    share_status: str = "TEAM",
    board_ids: list[str] | None = None,
) -> ToolResult:
    """Core logic for create_card tool."""
    body: dict[str, Any] = {
        "preferredPhrase": title,
        "content": content,
        "collection": {"id": collection_id},
        "shareStatus": share_status,
    }
    if board_ids:
        body["boards"] = [{"id": board_id} for board_id in board_ids]

    result = await api_client.request("/cards/extended", method="POST", body=body)
    if isinstance(result, GuruFailure):
        return ToolResult.failure("creating card", result.message)
    return ToolResult.success(result.payload)


async def execute_delete_card(api_client: GuruClient, card_id: str) -> ToolResult:
    result = await api_client.request(_card_path(card_id), method="DELETE")
    if isinstance(result, GuruFailure):
        return ToolResult.failure("deleting card", result.message)
    payload = result.payload if result.payload is not None else {"deleted": True, "cardId": card_id}
    return ToolResult.success(payload)


def build_verifier(verifier_id: str, verifier_type: str = "user") -> dict[str, Any]:
    """Guru verifier entry: a user (by e-mail) or a user group (by ID)."""
    if verifier_type == "user-group":
        return {"type": "user-group", "userGroup": {"id": verifier_id}}
    return {"type": "user", "user": {"email": verifier_id}}


async def execute_set_verifier(
    api_client: GuruClient,
    card_id: str,
    verifier_id: str,
    verifier_type: str = "user",
) -> ToolResult:
    """Core logic for set_verifier tool: replace the card's verifier, keeping its title and content."""
    current = await api_client.request(_card_path(card_id))
    if isinstance(current, GuruFailure):
        return ToolResult.failure("setting verifier", current.message)

    body = merge_card_fields(current.payload)
    body["verifiers"] = [build_verifier(verifier_id, verifier_type)]
    logger.info(f"Setting verifier of card {card_id} to {verifier_type} {verifier_id}")

    result = await api_client.request(_card_path(card_id), method="PUT", body=body)
    if isinstance(result, GuruFailure):
        return ToolResult.failure("setting verifier", result.message)
    return ToolResult.success(result.payload)
