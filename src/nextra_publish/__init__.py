"""Publish Obsidian notes to a Nextra site repository on GitHub or GitLab."""

from nextra_publish.config import Settings, load_settings
from nextra_publish.errors import (
    ConfigurationError,
    PartialPublishError,
    ProviderError,
    PublishError,
    PublishInProgressError,
    TransactionError,
)
from nextra_publish.models import ItemKind, Note, PublishItem, RemoteFile
from nextra_publish.protocols import NoteSourceProtocol, RemoteProvider, TransactionalProvider
from nextra_publish.publisher import ProgressEvent, Publisher, PublishResult, PublishState
from nextra_publish.vault import VaultNoteSource

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ItemKind",
    "Note",
    "NoteSourceProtocol",
    "PartialPublishError",
    "ProgressEvent",
    "ProviderError",
    "PublishError",
    "PublishInProgressError",
    "PublishItem",
    "PublishResult",
    "PublishState",
    "Publisher",
    "RemoteFile",
    "RemoteProvider",
    "Settings",
    "TransactionError",
    "TransactionalProvider",
    "VaultNoteSource",
    "load_settings",
]
