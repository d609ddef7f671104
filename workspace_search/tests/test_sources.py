"""
Tests for source providers and the concurrent collector.

HTTP collaborators run against httpx.MockTransport; nothing touches the network.
"""

import json
import pytest
import httpx
from unittest.mock import AsyncMock


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _workspace(**overrides):
    from workspace_search.workspaces import Workspace

    data = {
        "id": "ws-1",
        "name": "Acme",
        "githubRepository": {"owner": "acme", "repo": "widgets"},
        "members": [
            {"userId": "u1", "name": "Alice", "email": "alice@example.com", "role": "owner"},
        ],
    }
    data.update(overrides)
    return Workspace.model_validate(data)


class TestGitHubProvider:
    @pytest.mark.asyncio
    async def test_list_issues_request(self):
        from workspace_search.sources import GitHubProvider

        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"title": "Bug", "state": "open"}])

        provider = GitHubProvider(token="ghp-test", per_page=5, client=_client(handler))
        issues = await provider.list_issues("acme", "widgets")

        assert issues == [{"title": "Bug", "state": "open"}]
        request = seen[0]
        assert request.url.path == "/repos/acme/widgets/issues"
        assert request.url.params["per_page"] == "5"
        assert request.url.params["state"] == "all"
        assert request.headers["Authorization"] == "token ghp-test"
        assert "vnd.github.v3" in request.headers["Accept"]

    @pytest.mark.asyncio
    async def test_unauthenticated(self):
        from workspace_search.sources import GitHubProvider

        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"full_name": "acme/widgets"})

        provider = GitHubProvider(client=_client(handler))
        repo = await provider.get_repository("acme", "widgets")

        assert repo["full_name"] == "acme/widgets"
        assert "Authorization" not in seen[0].headers
        assert provider.has_token is False

    @pytest.mark.asyncio
    async def test_http_error_raises_source_error(self):
        from workspace_search.sources import GitHubProvider, SourceError

        provider = GitHubProvider(client=_client(lambda r: httpx.Response(404, json={})))

        with pytest.raises(SourceError) as exc_info:
            await provider.list_commits("acme", "missing")

        assert exc_info.value.source == "github"
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_list_payload_rejected(self):
        from workspace_search.sources import GitHubProvider, SourceError

        provider = GitHubProvider(client=_client(lambda r: httpx.Response(200, json={"message": "?"})))

        with pytest.raises(SourceError):
            await provider.list_releases("acme", "widgets")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        from workspace_search.sources import GitHubProvider, SourceError

        provider = GitHubProvider(client=_client(lambda r: httpx.Response(200, text="<html>")))

        with pytest.raises(SourceError):
            await provider.get_repository("acme", "widgets")


class TestNotionProvider:
    def test_build_query_with_created_and_workspace(self):
        from workspace_search.sources import NotionProvider

        provider = NotionProvider(token="secret", database_id="db1", page_size=10)
        payload = provider.build_query({"Created": {}, "Workspace": {}}, "Acme")

        assert payload["page_size"] == 10
        assert payload["sorts"] == [{"property": "Created", "direction": "descending"}]
        assert payload["filter"] == {"property": "Workspace", "select": {"equals": "Acme"}}

    def test_build_query_fallbacks(self):
        from workspace_search.sources import NotionProvider

        payload = NotionProvider(database_id="db1").build_query({}, "Acme")

        assert payload["sorts"] == [{"timestamp": "created_time", "direction": "descending"}]
        assert "filter" not in payload

    @pytest.mark.asyncio
    async def test_unconfigured_returns_nothing(self):
        from workspace_search.sources import NotionProvider

        def handler(request):
            raise AssertionError("no request expected")

        provider = NotionProvider(token="secret", client=_client(handler))

        assert provider.is_configured is False
        assert await provider.list_documents("Acme") == []

    @pytest.mark.asyncio
    async def test_list_documents_filters_workspace(self):
        from workspace_search.sources import NotionProvider

        def page(title, workspace=None):
            props = {"Name": {"type": "title", "title": [{"plain_text": title}]}}
            if workspace:
                props["Workspace"] = {"select": {"name": workspace}}
            return {"properties": props}

        def handler(request):
            if request.method == "GET":
                assert request.url.path == "/v1/databases/db1"
                return httpx.Response(200, json={"properties": {"Workspace": {}, "Name": {}}})
            body = json.loads(request.content)
            assert body["filter"]["select"]["equals"] == "Acme"
            assert request.headers["Notion-Version"] == "2022-06-28"
            return httpx.Response(200, json={"results": [
                page("Ours", "Acme"),
                page("Unassigned"),
                page("Theirs", "Other"),
            ]})

        provider = NotionProvider(token="secret", database_id="db1", client=_client(handler))
        documents = await provider.list_documents("Acme")

        titles = [d["properties"]["Name"]["title"][0]["plain_text"] for d in documents]
        assert titles == ["Ours", "Unassigned"]


class TestMemberRecords:
    def test_member_records(self):
        from workspace_search.sources import member_records

        records = member_records(_workspace())

        assert records == [{
            "userId": "u1",
            "name": "Alice",
            "email": "alice@example.com",
            "role": "owner",
            "joinedAt": None,
        }]


class TestSourceCollector:
    @pytest.fixture
    def github(self):
        github = AsyncMock()
        github.get_repository.return_value = {"full_name": "acme/widgets"}
        github.list_issues.return_value = [{"title": "Issue", "state": "open"}]
        github.list_pull_requests.return_value = [{"title": "PR", "state": "open"}]
        github.list_commits.return_value = [{"sha": "1", "commit": {"message": "Commit"}}]
        github.list_releases.return_value = []
        github.list_contributors.return_value = [{"login": "alice", "contributions": 3}]
        return github

    @pytest.mark.asyncio
    async def test_collect_all_sources(self, github):
        from unittest.mock import Mock
        from workspace_search.sources import SourceCollector

        notion = Mock()
        notion.is_configured = True
        notion.list_documents = AsyncMock(return_value=[{"properties": {}}])

        bundle = await SourceCollector(github=github, notion=notion).collect(_workspace())

        assert bundle.failures == []
        assert bundle.repository["full_name"] == "acme/widgets"
        assert bundle.repository["contributors"] == [{"login": "alice", "contributions": 3}]
        assert len(bundle.issues) == 1
        assert len(bundle.documents) == 1
        assert bundle.source_counts() == {"github": 4, "notion": 1, "members": 1}
        github.list_issues.assert_awaited_once_with("acme", "widgets")
        notion.list_documents.assert_awaited_once_with("Acme")

    @pytest.mark.asyncio
    async def test_failing_source_is_absorbed(self, github):
        from workspace_search.sources import SourceCollector, SourceError

        github.list_issues.side_effect = SourceError("github", "rate limited")
        github.list_contributors.side_effect = SourceError("github", "rate limited")

        bundle = await SourceCollector(github=github).collect(_workspace())

        assert bundle.failures == ["issues", "contributors"]
        assert bundle.issues == []
        assert len(bundle.pull_requests) == 1
        assert bundle.repository["contributors"] == []

    @pytest.mark.asyncio
    async def test_workspace_without_repository(self, github):
        from workspace_search.sources import SourceCollector

        bundle = await SourceCollector(github=github).collect(
            _workspace(githubRepository=None)
        )

        assert bundle.repository is None
        assert bundle.github_count == 0
        assert len(bundle.members) == 1
        github.get_repository.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_providers(self):
        from workspace_search.sources import SourceCollector

        bundle = await SourceCollector().collect(_workspace())

        assert bundle.source_counts() == {"github": 0, "notion": 0, "members": 1}


class TestSourceBundleCounts:
    @pytest.fixture
    def bundle(self):
        from workspace_search.sources import SourceBundle

        return SourceBundle(
            repository={"full_name": "acme/widgets"},
            issues=[
                {"title": "Real issue", "state": "open"},
                {"title": "Add search", "state": "open", "pull_request": {"url": "https://api.github.com/pulls/2"}},
            ],
            pull_requests=[{"title": "Add search", "state": "open"}],
        )

    def test_pull_requests_in_issue_listing_counted_once(self, bundle):
        assert bundle.github_count == 3
        assert bundle.source_counts() == {"github": 3, "notion": 0, "members": 0}

    def test_counts_match_normalized_artifacts(self, bundle):
        from workspace_search.common.schemas import SearchQuery
        from workspace_search.retriever import SearchPipeline

        pipeline = SearchPipeline()
        response = pipeline.search(SearchQuery.from_request("search"), bundle)

        assert response.sources["github"] == len(pipeline.normalizer.normalize(bundle))
