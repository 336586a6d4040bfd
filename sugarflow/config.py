"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables, from files
(Docker secrets) or from the local secrets file written by the
``set-token`` commands. Never put real tokens in config files committed
to the repo.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SECRETS_FILE = ".sugarflow/secrets.yaml"

LOG = logging.getLogger("sugarflow.config")


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        try:
            return Path(file_path).read_text().strip() or None
        except OSError as e:
            LOG.warning("Cannot read %s=%s: %s", file_env_key, file_path, e)
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${")


class JiraConfig(BaseSettings):
    """Issue tracker (Jira REST v2) settings."""

    model_config = SettingsConfigDict(env_prefix="JIRA_", extra="ignore")

    domain: str = Field(default="", description="Base URL, e.g. https://example.atlassian.net")
    username: str = Field(default="", description="Account email used for basic auth and assignment")
    api_token: str | None = Field(default=None, description="API token; prefer env, secret file or set-token")
    git_link_field: str = Field(default="customfield_12000", description="Custom field storing the PR URL")
    start_transition: str = Field(
        default="Start Progress",
        description="Transition (or target status) name that moves a ticket to in progress",
    )
    # Used only when no transition on the ticket matches start_transition
    fallback_transition_id: str | None = Field(default="4", description="Transition id fallback")
    in_progress_status: str = Field(default="In Progress", description="Status name of an active ticket")


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    repository: str = Field(default="owner/repo", description="Target repo e.g. cmitoi-sugarcrm/Mango")
    base_branch: str = Field(default="master", description="Base branch for pull requests")


class GitConfig(BaseSettings):
    """Local repository settings."""

    model_config = SettingsConfigDict(env_prefix="GIT_", extra="ignore")

    workspace: str = Field(default=".", description="Repository root all git commands run in")
    remote: str = Field(default="origin", description="Remote to push ticket branches to")
    upstream: str = Field(default="upstream/master", description="Ref new ticket branches track")


class DockerConfig(BaseSettings):
    """Container helper settings."""

    model_config = SettingsConfigDict(env_prefix="DOCKER_", extra="ignore")

    image: str = Field(default="sugar-dev", description="Image tag to build and run")
    dockerfile: str = Field(default="Dockerfile", description="Path to the Dockerfile")
    ports: List[str] = Field(default_factory=lambda: ["80:80", "3306:3306", "9200:9200"])
    default_version: str = Field(default="14.2.0", description="Version passed to the setup command")
    setup_command: str = Field(
        default=(
            "cd /app/build/rome && php build.php --ver={version} --build_dir=/var/www/html/sugar/"
            " && cd /var/www/html && chmod -R 777 sugar/* && cd sugar/ent/sugarcrm"
            " && composer install && yarn && yarn build:tw && cd sidecar && yarn && gulp build"
        ),
        description="Shell command run inside the container; {version} is substituted",
    )
    timeout: int = Field(default=1800, ge=1, description="Timeout in seconds for build and exec")


class BridgeConfig(BaseSettings):
    """Panel bridge (HTTP transport) settings."""

    model_config = SettingsConfigDict(env_prefix="BRIDGE_", extra="ignore")

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8765, ge=1, le=65535, description="Bind port")
    refresh_interval_seconds: int = Field(default=5, ge=1, description="Changed files refresh interval")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    quiet_loggers: List[str] = Field(
        default_factory=lambda: ["urllib3", "requests"],
        description="Third-party loggers held at WARNING unless debug_http is set",
    )
    debug_http: bool = Field(default=False, description="Let HTTP client loggers follow the root level")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    jira: JiraConfig = Field(default_factory=JiraConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def workspace_path(self) -> Path:
        """Repository root as an absolute path."""
        return Path(self.git.workspace or ".").resolve()

    @property
    def jira_token_resolved(self) -> str | None:
        """Resolve Jira token from config, env, Docker secret file or local secrets."""
        t = self.jira.api_token
        if not _is_placeholder(t):
            return t
        return _read_secret("JIRA_API_TOKEN", "JIRA_API_TOKEN_FILE") or load_secrets(
            self.workspace_path
        ).get("jira_api_token")

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env, Docker secret file or local secrets."""
        t = self.github.token
        if not _is_placeholder(t):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE") or load_secrets(
            self.workspace_path
        ).get("github_token")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_secrets(workspace: Path) -> Dict[str, str]:
    """Read the local secrets file; empty dict if missing or unreadable."""
    path = Path(workspace) / SECRETS_FILE
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return {str(k): str(v) for k, v in data.items() if v}


def save_secret(workspace: Path, key: str, value: str) -> Path:
    """Store one secret in the local secrets file (mode 0600)."""
    path = Path(workspace) / SECRETS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    data = load_secrets(workspace)
    data[key] = value
    path.write_text(yaml.safe_dump(data, default_flow_style=False), encoding="utf-8")
    path.chmod(0o600)
    return path


def save_setting(config_path: Path, section: str, key: str, value: str) -> Path:
    """Update one plain setting in the YAML config file, creating it if needed."""
    path = Path(config_path)
    raw: Dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    raw.setdefault(section, {})[key] = value
    path.write_text(yaml.safe_dump(raw, default_flow_style=False, sort_keys=False), encoding="utf-8")
    return path


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: JIRA_API_TOKEN or JIRA_API_TOKEN_FILE, GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        jira=JiraConfig(**(raw.get("jira") or {})),
        github=GitHubConfig(**(raw.get("github") or {})),
        git=GitConfig(**(raw.get("git") or {})),
        docker=DockerConfig(**(raw.get("docker") or {})),
        bridge=BridgeConfig(**(raw.get("bridge") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
