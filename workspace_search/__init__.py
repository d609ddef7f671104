"""
Workspace Search

Semantic search and direct answers over a workspace's connected sources
(GitHub repository activity, Notion documents, team members).

Philosophy:
- Every query re-scores a freshly collected, in-memory artifact set
- Scoring is explainable: lexical match, keyword tags, context boosts, recency
- Recognized questions ("how many open issues?") get a direct answer first
- A failing source degrades the result set, never the request

Usage:
    from workspace_search.common import load_config
    from workspace_search.retriever import SearchPipeline, SearchQuery
    from workspace_search.sources import SourceCollector, GitHubProvider, NotionProvider
"""

__version__ = "0.1.0"
