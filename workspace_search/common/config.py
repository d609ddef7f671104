"""
Configuration Management for Workspace Search

Loads configuration from ~/.workspace_search/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("wsearch.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".workspace_search"
CONFIG_PATH = CONFIG_DIR / "config.json"
WORKSPACES_PATH = CONFIG_DIR / "workspaces.json"


@dataclass
class GitHubConfig:
    """GitHub REST API configuration"""
    token: str = ""
    api_url: str = "https://api.github.com"
    per_page: int = 10
    timeout: float = 10.0


@dataclass
class NotionConfig:
    """Notion database configuration"""
    token: str = ""
    database_id: str = ""
    api_version: str = "2022-06-28"
    page_size: int = 20
    timeout: float = 10.0


@dataclass
class SearchConfig:
    """Search behaviour configuration"""
    suggestion_count: int = 8


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 5000
    workspaces_path: str = str(WORKSPACES_PATH)
    log_level: str = "info"


@dataclass
class WorkspaceSearchConfig:
    """Main configuration"""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    notion: NotionConfig = field(default_factory=NotionConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    _env_sourced_keys: set = field(default_factory=set, repr=False)


def _parse_github_config(data: dict) -> GitHubConfig:
    """Parse github section from config dict"""
    github_data = data.get("github", {})
    return GitHubConfig(
        token=github_data.get("token", ""),
        api_url=github_data.get("api_url", "https://api.github.com"),
        per_page=github_data.get("per_page", 10),
        timeout=github_data.get("timeout", 10.0),
    )


def _parse_notion_config(data: dict) -> NotionConfig:
    """Parse notion section from config dict"""
    notion_data = data.get("notion", {})
    return NotionConfig(
        token=notion_data.get("token", ""),
        database_id=notion_data.get("database_id", ""),
        api_version=notion_data.get("api_version", "2022-06-28"),
        page_size=notion_data.get("page_size", 20),
        timeout=notion_data.get("timeout", 10.0),
    )


def _parse_search_config(data: dict) -> SearchConfig:
    """Parse search section from config dict"""
    search_data = data.get("search", {})
    return SearchConfig(
        suggestion_count=search_data.get("suggestion_count", 8),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 5000),
        workspaces_path=server_data.get("workspaces_path", str(WORKSPACES_PATH)),
        log_level=server_data.get("log_level", "info"),
    )


def load_config() -> WorkspaceSearchConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.workspace_search/config.json)
    3. Default values
    """
    config = WorkspaceSearchConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.github = _parse_github_config(data)
            config.notion = _parse_notion_config(data)
            config.search = _parse_search_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Secret overrides (tracked so save_config never writes them to disk)
    _env_secret_map = {
        "GITHUB_TOKEN": (config.github, "token"),
        "NOTION_TOKEN": (config.notion, "token"),
    }
    for env_var, (section, attr) in _env_secret_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(section, attr, val)
            config._env_sourced_keys.add(env_var)

    if os.getenv("GITHUB_API_URL"):
        config.github.api_url = os.getenv("GITHUB_API_URL")
    if os.getenv("NOTION_DATABASE_ID"):
        config.notion.database_id = os.getenv("NOTION_DATABASE_ID")
    if os.getenv("NOTION_VERSION"):
        config.notion.api_version = os.getenv("NOTION_VERSION")

    if os.getenv("SEARCH_HOST"):
        config.server.host = os.getenv("SEARCH_HOST")
    if os.getenv("SEARCH_PORT"):
        config.server.port = int(os.getenv("SEARCH_PORT"))
    if os.getenv("WORKSPACES_PATH"):
        config.server.workspaces_path = os.getenv("WORKSPACES_PATH")
    if os.getenv("LOG_LEVEL"):
        config.server.log_level = os.getenv("LOG_LEVEL").lower()

    return config


def save_config(config: WorkspaceSearchConfig) -> None:
    """Save configuration to file.

    Tokens that were sourced from environment variables are written
    as empty strings so that secrets are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    data = {
        "github": {
            "token": "" if "GITHUB_TOKEN" in env_sourced else config.github.token,
            "api_url": config.github.api_url,
            "per_page": config.github.per_page,
            "timeout": config.github.timeout,
        },
        "notion": {
            "token": "" if "NOTION_TOKEN" in env_sourced else config.notion.token,
            "database_id": config.notion.database_id,
            "api_version": config.notion.api_version,
            "page_size": config.notion.page_size,
            "timeout": config.notion.timeout,
        },
        "search": {
            "suggestion_count": config.search.suggestion_count,
        },
        "server": {
            "host": config.server.host,
            "port": config.server.port,
            "workspaces_path": config.server.workspaces_path,
            "log_level": config.server.log_level,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)
