"""Configuration for nextra-publish."""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from loguru import logger

from nextra_publish.core.paths import normalize_prefix
from nextra_publish.errors import ConfigurationError

# Settings location. First file found is used.
SETTINGS_FILES: list[Path] = [
    Path("~/.config/nextra-publish/settings.json").expanduser(),
    Path("~/.nextra-publish.json").expanduser(),
]

# Settings written by the Obsidian plugin, relative to the vault root.
PLUGIN_DATA_FILE = Path(".obsidian/plugins/nextra-publish/data.json")

# Environment variable that overrides the access token from any settings file.
TOKEN_ENV_VAR = "NEXTRA_PUBLISH_TOKEN"

PROVIDERS = ("github", "gitlab")

DEFAULT_FRONTMATTER_KEY = "nextra-publish"
DEFAULT_IMAGE_PUBLISH_PATH = "/public"
DEFAULT_MARKDOWN_PUBLISH_PATH = "/pages"
DEFAULT_MAX_WORKERS = 8

# Credential fields that must be set before any remote call, per provider.
REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "github": ("user_name", "repository_name", "access_token"),
    "gitlab": ("repository_name", "access_token", "base_url"),
}

# Plugin data.json keys, per provider, mapped to Settings fields.
_PLUGIN_KEYS: dict[str, dict[str, str]] = {
    "github": {
        "githubUserName": "user_name",
        "githubRepositoryName": "repository_name",
        "githubToken": "access_token",
        "githubBranchName": "branch_name",
    },
    "gitlab": {
        "gitlabRepositoryID": "repository_name",
        "gitlabToken": "access_token",
        "gitlabUrl": "base_url",
        "gitlabBranchName": "branch_name",
    },
}
_COMMON_PLUGIN_KEYS = {
    "publishFontmatterKey": "publish_frontmatter_key",
    "imagePublishPath": "image_publish_path",
    "markdownPublishPath": "markdown_publish_path",
}


@dataclass(frozen=True)
class Settings:
    """Immutable configuration snapshot for one publish run."""

    provider: str = "github"
    user_name: str | None = None
    repository_name: str | None = None
    access_token: str | None = None
    base_url: str | None = None
    branch_name: str | None = None
    publish_frontmatter_key: str = DEFAULT_FRONTMATTER_KEY
    image_publish_path: str = DEFAULT_IMAGE_PUBLISH_PATH
    markdown_publish_path: str = DEFAULT_MARKDOWN_PUBLISH_PATH
    use_merge_request: bool = False
    max_workers: int = DEFAULT_MAX_WORKERS

    @property
    def prefixes(self) -> tuple[str, str]:
        """The two managed publish prefixes, as configured."""
        return (self.image_publish_path, self.markdown_publish_path)

    def validate(self) -> None:
        """Raise ConfigurationError unless this snapshot is safe to publish with."""
        if self.provider not in PROVIDERS:
            msg = f"Unknown provider {self.provider!r}, expected one of {PROVIDERS!r}"
            raise ConfigurationError(msg)

        missing = [name for name in REQUIRED_FIELDS[self.provider] if not getattr(self, name)]
        if missing:
            msg = f"{self.provider} authentication info is required: missing {', '.join(missing)}"
            raise ConfigurationError(msg)

        if not self.publish_frontmatter_key:
            msg = "publish_frontmatter_key must not be empty"
            raise ConfigurationError(msg)

        for name in ("image_publish_path", "markdown_publish_path"):
            if not normalize_prefix(getattr(self, name)):
                msg = f"{name} must name a directory below the repository root"
                raise ConfigurationError(msg)

        if self.max_workers < 1:
            msg = f"max_workers must be positive, got {self.max_workers!r}"
            raise ConfigurationError(msg)


def settings_from_dict(data: dict[str, Any], provider: str) -> Settings:
    """Build Settings from a parsed settings file.

    Accepts both snake_case field names and the camelCase keys of the
    Obsidian plugin's data.json. Unknown keys are ignored.
    """
    if provider not in PROVIDERS:
        msg = f"Unknown provider {provider!r}, expected one of {PROVIDERS!r}"
        raise ConfigurationError(msg)

    field_names = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}
    for key, field_name in {**_COMMON_PLUGIN_KEYS, **_PLUGIN_KEYS[provider]}.items():
        if data.get(key) not in (None, ""):
            values[field_name] = data[key]
    for key, value in data.items():
        if key in field_names and value is not None:
            values[key] = value

    values["provider"] = provider
    for key in ("repository_name", "user_name"):
        if key in values:
            # GitLab project ids are often stored as numbers.
            values[key] = str(values[key])
    return Settings(**values)


def _find_settings_file(vault: Path | None) -> Path | None:
    candidates = list(SETTINGS_FILES)
    if vault is not None:
        candidates.insert(0, Path(vault) / PLUGIN_DATA_FILE)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_settings(
    provider: str,
    *,
    settings_file: Path | None = None,
    vault: Path | None = None,
) -> Settings:
    """Load settings for a provider.

    Uses settings_file if given, else the vault's plugin data.json, else the
    first existing entry of SETTINGS_FILES. A missing file yields defaults.
    The access token may be overridden through NEXTRA_PUBLISH_TOKEN.

    The result is not validated; call Settings.validate() at entry.
    """
    path = settings_file if settings_file is not None else _find_settings_file(vault)
    data: dict[str, Any] = {}
    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            msg = f"Settings file not found: {path}"
            raise ConfigurationError(msg) from None
        except json.JSONDecodeError as e:
            msg = f"Settings file {path} is not valid JSON: {e}"
            raise ConfigurationError(msg) from e
        if not isinstance(data, dict):
            msg = f"Settings file {path} must contain a JSON object"
            raise ConfigurationError(msg)
        logger.debug("Settings loaded from {}", path)
    else:
        logger.debug("No settings file found, using defaults")

    settings = settings_from_dict(data, provider)

    token = os.environ.get(TOKEN_ENV_VAR)
    if token:
        settings = replace(settings, access_token=token)
    return settings
