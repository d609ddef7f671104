"""
Pipeline Scenario Tests

End-to-end over the pure pipeline: collected records -> ranked response.
No network; `now` is fixed so results are reproducible.
"""

import pytest
from datetime import datetime, timezone

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _issue(number, title, state, updated="2024-05-01T00:00:00Z"):
    return {
        "number": number,
        "title": title,
        "state": state,
        "body": "",
        "labels": [],
        "user": {"login": "alice"},
        "created_at": "2024-04-01T00:00:00Z",
        "updated_at": updated,
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
    }


@pytest.fixture
def bundle():
    from workspace_search.sources.collector import SourceBundle

    return SourceBundle(
        repository={
            "full_name": "acme/widgets",
            "description": "Widget factory",
            "language": "Python",
            "stargazers_count": 12,
            "forks_count": 3,
            "contributors": [{"login": "alice", "contributions": 40}],
        },
        issues=[
            _issue(1, "Crash on startup", "open"),
            _issue(2, "Search is slow", "open"),
            _issue(3, "Docs typo", "open"),
            _issue(4, "Old regression", "closed"),
            _issue(5, "Legacy cleanup", "closed"),
        ],
        commits=[{
            "sha": "abc1234def",
            "commit": {
                "message": "Speed up search indexing",
                "author": {"name": "Bob", "date": "2024-05-20T00:00:00Z"},
            },
        }],
        documents=[{
            "url": "https://notion.so/notes",
            "created_time": "2024-05-25T00:00:00.000Z",
            "properties": {
                "Name": {"type": "title", "title": [{"plain_text": "Weekly meeting notes"}]},
                "Type": {"select": {"name": "Meeting Notes"}},
            },
        }],
        members=[{"userId": "u1", "name": "Alice", "email": "alice@example.com", "role": "owner"}],
    )


@pytest.fixture
def pipeline():
    from workspace_search.retriever import SearchPipeline
    return SearchPipeline()


class TestSearchQueryValidation:
    @pytest.mark.parametrize("raw", [None, "", "   ", 42])
    def test_empty_query_rejected(self, raw):
        from workspace_search.common.schemas import InvalidQueryError, SearchQuery

        with pytest.raises(InvalidQueryError):
            SearchQuery.from_request(raw, {})

    def test_query_is_trimmed(self):
        from workspace_search.common.schemas import SearchQuery, FilterType

        query = SearchQuery.from_request("  open issues ", None)

        assert query.text == "open issues"
        assert query.filter.type == FilterType.ALL
        assert query.filter.limit is None

    def test_filter_aliases(self):
        from workspace_search.common.schemas import SearchQuery, FilterType

        assert SearchQuery.from_request("x", {"type": "docs"}).filter.type == FilterType.DOCUMENTS
        assert SearchQuery.from_request("x", {"type": "GitHub"}).filter.type == FilterType.GITHUB

    @pytest.mark.parametrize("filters", [
        {"type": "spreadsheets"},
        {"limit": 0},
        {"limit": -3},
        {"limit": "many"},
        {"limit": True},
    ])
    def test_invalid_filters_rejected(self, filters):
        from workspace_search.common.schemas import InvalidQueryError, SearchQuery

        with pytest.raises(InvalidQueryError):
            SearchQuery.from_request("open issues", filters)

    def test_invalid_query_is_value_error(self):
        from workspace_search.common.schemas import InvalidQueryError

        assert issubclass(InvalidQueryError, ValueError)


class TestPipelineScenarios:
    def test_open_issue_count_answer_first(self, pipeline, bundle):
        from workspace_search.common.schemas import AnswerType, SearchQuery

        query = SearchQuery.from_request("how many open issues are there?")
        response = pipeline.search(query, bundle, now=NOW)

        answers = [r for r in response.results if r.is_answer]
        assert len(answers) == 1
        assert answers[0].answer_type == AnswerType.COUNT
        assert answers[0].metadata["count"] == 3
        assert response.results[0].is_answer

    def test_artifacts_follow_answers(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        query = SearchQuery.from_request("how many open issues are there?")
        response = pipeline.search(query, bundle, now=NOW)

        rest = response.results[1:]
        assert rest
        assert not any(r.is_answer for r in rest)
        assert all(r.relevance_score > 0.1 for r in rest)
        assert all(0.0 <= r.relevance_score <= 3.0 for r in rest)

    def test_idempotent(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        query = SearchQuery.from_request("recent search commits")
        first = pipeline.search(query, bundle, now=NOW)
        second = pipeline.search(query, bundle, now=NOW)

        assert first.to_response() == second.to_response()

    def test_members_filter(self, pipeline, bundle):
        from workspace_search.common.schemas import ArtifactKind, SearchQuery

        query = SearchQuery.from_request("alice owner", {"type": "members"})
        response = pipeline.search(query, bundle, now=NOW)

        assert response.results
        assert all(
            r.is_answer or r.kind == ArtifactKind.MEMBER
            for r in response.results
        )

    def test_no_results_is_not_an_error(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        response = pipeline.search(SearchQuery.from_request("kubernetes"), bundle, now=NOW)

        assert response.results == []
        assert response.total == 0

    def test_response_shape(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        query = SearchQuery.from_request("meeting notes", {"type": "documents", "limit": 5})
        payload = pipeline.search(query, bundle, now=NOW).to_response()

        assert payload["success"] is True
        assert payload["query"] == "meeting notes"
        assert payload["filters"] == {"type": "documents", "limit": 5}
        assert payload["sources"] == {"github": 7, "notion": 1, "members": 1}
        assert payload["total"] == len(payload["results"])

        doc = payload["results"][0]
        assert doc["kind"] == "document"
        assert doc["title"] == "Weekly meeting notes"
        assert "relevanceScore" in doc
        assert "createdAt" in doc

    def test_run_accepts_naive_now(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        artifacts = pipeline.normalizer.normalize(bundle)
        query = SearchQuery.from_request("latest commits")

        naive = pipeline.run(query, artifacts, datetime(2024, 6, 1))
        aware = pipeline.run(query, artifacts, NOW)

        assert [a.title for a in naive] == [a.title for a in aware]

    def test_artifacts_not_mutated(self, pipeline, bundle):
        from workspace_search.common.schemas import SearchQuery

        artifacts = pipeline.normalizer.normalize(bundle)
        before = [a.relevance_score for a in artifacts]

        pipeline.run(SearchQuery.from_request("open issues"), artifacts, NOW)

        assert [a.relevance_score for a in artifacts] == before

    def test_naive_artifact_timestamps(self, pipeline):
        from workspace_search.common.schemas import Artifact, ArtifactKind, SearchQuery

        commit = Artifact(kind=ArtifactKind.COMMIT, title="fix login", created_at="2024-05-20T00:00:00")
        ranked = pipeline.run(SearchQuery.from_request("recent commits"), [commit], NOW)

        assert ranked[0].is_answer
        scored = ranked[1]
        assert scored.title == "fix login"
        # 0.9 pattern bonus + 0.5 kind + 0.4 recency
        assert scored.relevance_score == pytest.approx(1.8)
        assert scored.created_at.tzinfo is not None
