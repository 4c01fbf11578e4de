#!/usr/bin/env python3
"""
Test card search filter composition.

Filters become clauses of the `q` expression joined with AND; several
verifiers are OR-ed inside parentheses; search terms, page size and sorting
travel as separate query parameters.
"""

from urllib.parse import parse_qs, urlparse

from guru_mcp.mcp_tools import build_card_query, build_card_search_path


def _params(path: str) -> dict[str, str]:
    parsed = urlparse(path)
    return {k: v[0] for k, v in parse_qs(parsed.query).items()}


class TestBuildCardQuery:
    def test_no_filters(self):
        assert build_card_query() is None

    def test_verification_state_and_collection(self):
        query = build_card_query(verification_state="trusted", collection_id="abc")
        assert query == "verificationState = trusted AND boards CONTAINS abc"

    def test_single_verifier_has_no_parentheses(self):
        assert build_card_query(verifier_ids=["a@x.com"]) == 'verifierId = "a@x.com"'

    def test_multiple_verifiers_are_ored(self):
        query = build_card_query(verifier_ids=["a@x.com", "b@x.com"])
        assert query == '(verifierId = "a@x.com" OR verifierId = "b@x.com")'

    def test_all_filters(self):
        query = build_card_query(
            verification_state="needsVerification",
            collection_id="col-1",
            verifier_ids=["a@x.com", "grp-1"],
        )
        assert query == (
            'verificationState = needsVerification AND boards CONTAINS col-1 AND (verifierId = "a@x.com" OR verifierId = "grp-1")'
        )

    def test_empty_verifier_list_is_ignored(self):
        assert build_card_query(verifier_ids=[]) is None


class TestBuildCardSearchPath:
    def test_defaults_only_send_page_size(self):
        path = build_card_search_path()
        assert urlparse(path).path == "/search/query"
        assert _params(path) == {"maxResults": "50"}

    def test_search_terms_not_merged_into_filter(self):
        path = build_card_search_path(search_terms="onboarding guide", verification_state="trusted")
        params = _params(path)
        assert params["q"] == "verificationState = trusted"
        assert params["searchTerms"] == "onboarding guide"

    def test_sorting_and_page_size(self):
        params = _params(build_card_search_path(max_results=10, sort_field="lastModified", sort_order="desc"))
        assert params == {"maxResults": "10", "sortField": "lastModified", "sortOrder": "desc"}

    def test_no_parameters_gives_bare_path(self):
        assert build_card_search_path(max_results=None) == "/search/query"
