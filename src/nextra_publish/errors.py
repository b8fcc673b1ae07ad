"""Exception types raised while publishing."""

from dataclasses import dataclass


class PublishError(RuntimeError):
    """Base class for all publish failures."""


class ConfigurationError(PublishError, ValueError):
    """Settings are incomplete or unsafe. Raised before any remote call."""


class PublishInProgressError(PublishError):
    """Another publish run is still active on this publisher."""


class ProviderError(PublishError):
    """A remote hosting API call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class ItemFailure:
    """A single remote write or delete that failed."""

    path: str
    error: str


class PartialPublishError(PublishError):
    """Some items of a batch failed; the others were applied."""

    def __init__(self, *, completed: int, failures: list[ItemFailure]) -> None:
        paths = ", ".join(f.path for f in failures[:5])
        super().__init__(f"{len(failures)} item(s) failed ({completed} succeeded): {paths}")
        self.completed = completed
        self.failures = failures


class TransactionError(PublishError):
    """A branch/merge-request step failed. Already created branches are not cleaned up."""

    def __init__(self, *, step: str, branch: str | None, cause: Exception) -> None:
        msg = f"Transactional publish failed at {step!r}"
        if branch:
            msg += f" (branch {branch!r} left on remote)"
        super().__init__(f"{msg}: {cause}")
        self.step = step
        self.branch = branch
