"""Remote hosting providers."""

from nextra_publish.config import Settings
from nextra_publish.errors import ConfigurationError
from nextra_publish.providers.github import GitHubProvider
from nextra_publish.providers.gitlab import GitLabProvider
from nextra_publish.protocols import RemoteProvider

__all__ = ["GitHubProvider", "GitLabProvider", "make_provider"]


def make_provider(settings: Settings) -> RemoteProvider:
    """Build the provider client named by settings.provider."""
    if settings.provider == "github":
        return GitHubProvider.from_settings(settings)
    if settings.provider == "gitlab":
        return GitLabProvider.from_settings(settings)
    msg = f"Unknown provider {settings.provider!r}"
    raise ConfigurationError(msg)
