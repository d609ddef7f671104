"""Tests for RelevanceScorer and ContextBooster."""

import pytest
from datetime import datetime, timedelta, timezone

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _artifact(kind=None, title="Untitled", **fields):
    from workspace_search.common.schemas import Artifact, ArtifactKind
    return Artifact(kind=kind or ArtifactKind.ISSUE, title=title, **fields)


class TestRelevanceScorer:
    @pytest.fixture
    def scorer(self):
        from workspace_search.retriever.scorer import RelevanceScorer
        return RelevanceScorer()

    def test_tokenize_drops_short_tokens(self):
        from workspace_search.retriever.scorer import tokenize

        assert tokenize("Is the API up") == ["the", "api"]

    def test_exact_match_saturates(self, scorer):
        assert scorer.score_field("Deployment process guide", "deployment process", []) == pytest.approx(1.0)

    def test_token_matches(self, scorer):
        # "login" matches, "flow" does not
        assert scorer.score_field("Login page broken", "login flow", []) == pytest.approx(0.3)

    def test_keyword_affinity(self, scorer):
        # "auth" is contained in the "authentication" tag
        assert scorer.score_field("Unrelated", "auth", ["authentication"]) == pytest.approx(0.4)

    def test_short_tokens_skip_keyword_affinity(self, scorer):
        # Two-letter tokens would match almost any tag as a substring
        assert scorer.score_field("Unrelated", "pr", ["pull request", "pr"]) == 0.0
        assert scorer.score_field("Unrelated", "prs", ["pr"]) == pytest.approx(0.4)

    def test_no_match(self, scorer):
        assert scorer.score_field("Nothing here", "kubernetes", ["issue"]) == 0.0

    def test_description_weighted(self, scorer):
        artifact = _artifact(title="Unrelated", description="the payment gateway")

        assert scorer.score(artifact, "payment gateway") == pytest.approx(0.8)

    def test_pattern_bonus(self, scorer):
        assert scorer.pattern_bonus("show me recent commits") == pytest.approx(0.9)
        assert scorer.pattern_bonus("latest release") == pytest.approx(0.8)
        assert scorer.pattern_bonus("nothing special") == 0.0

    def test_score_clamped_to_one(self, scorer):
        artifact = _artifact(title="open issues", keywords=["issue", "open"])

        assert scorer.score(artifact, "open issues") == pytest.approx(1.0)

    @pytest.mark.parametrize("query", [
        "open issues",
        "recent commits and latest release for the team members",
        "x",
        "meeting notes design docs",
    ])
    def test_score_range(self, scorer, query):
        artifacts = [
            _artifact(title="open issues in recent commits", description="meeting notes", keywords=["issue", "commit"]),
            _artifact(title="x", description=""),
            _artifact(title="zzz", description="yyy"),
        ]
        for artifact in artifacts:
            assert 0.0 <= scorer.score(artifact, query) <= 1.0


class TestContextBooster:
    @pytest.fixture
    def booster(self):
        from workspace_search.retriever.booster import ContextBooster
        return ContextBooster()

    def test_mentioned_kinds(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        kinds = booster.mentioned_kinds("open PRs and issues in the repo")
        assert kinds == {ArtifactKind.PULL_REQUEST, ArtifactKind.ISSUE, ArtifactKind.REPO}

    def test_kind_boost(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        assert booster.kind_boost(_artifact(ArtifactKind.COMMIT), "recent commits") == pytest.approx(0.5)
        assert booster.kind_boost(_artifact(ArtifactKind.ISSUE), "recent commits") == 0.0

    def test_state_boost_open_vs_closed_pull_request(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        open_pr = _artifact(ArtifactKind.PULL_REQUEST, "Refactor", state="open")
        closed_pr = _artifact(ArtifactKind.PULL_REQUEST, "Refactor", state="closed")
        query = "open pull requests"

        diff = booster.combine(open_pr, query, NOW) - booster.combine(closed_pr, query, NOW)
        assert diff == pytest.approx(0.3)

    def test_state_boost_merged(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        pr = _artifact(ArtifactKind.PULL_REQUEST, "Refactor", state="closed", merged=True)
        assert booster.state_boost(pr, "merged prs") == pytest.approx(0.3)

    def test_state_boost_requires_state(self, booster):
        assert booster.state_boost(_artifact(), "open things") == 0.0

    def test_recency_windows(self, booster):
        fresh = _artifact(created_at=NOW - timedelta(days=10))
        older = _artifact(created_at=NOW - timedelta(days=60))
        stale = _artifact(created_at=NOW - timedelta(days=120))
        undated = _artifact()

        assert booster.recency_boost(fresh, "latest news", NOW) == pytest.approx(0.4)
        assert booster.recency_boost(older, "latest news", NOW) == pytest.approx(0.2)
        assert booster.recency_boost(stale, "latest news", NOW) == 0.0
        assert booster.recency_boost(undated, "latest news", NOW) == 0.0

    def test_recency_prefers_published_at(self, booster):
        release = _artifact(
            created_at=NOW - timedelta(days=200),
            published_at=NOW - timedelta(days=5),
        )
        assert booster.recency_boost(release, "new release", NOW) == pytest.approx(0.4)

    def test_recency_requires_word(self, booster):
        fresh = _artifact(created_at=NOW - timedelta(days=1))
        assert booster.recency_boost(fresh, "commits", NOW) == 0.0

    def test_combined_clamped_to_three(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        pr = _artifact(
            ArtifactKind.PULL_REQUEST,
            "recent open pull requests",
            state="open",
            keywords=["pull request", "open"],
            created_at=NOW - timedelta(days=1),
        )
        score = booster.combine(pr, "recent open pull requests", NOW)

        # 1.0 + 0.5 + 0.3 + 0.4
        assert score == pytest.approx(2.2)
        assert score <= 3.0

    def test_combined_range(self, booster):
        from workspace_search.common.schemas import ArtifactKind

        queries = ["recent open merged issues prs commits releases repo docs team", "nothing"]
        for kind in ArtifactKind:
            if kind == ArtifactKind.ANSWER:
                continue
            artifact = _artifact(kind, "open", state="open", merged=True, created_at=NOW)
            for query in queries:
                assert 0.0 <= booster.combine(artifact, query, NOW) <= 3.0
