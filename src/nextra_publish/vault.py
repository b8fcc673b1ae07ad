"""Filesystem-backed note source for an Obsidian vault."""

import posixpath
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml
from loguru import logger

from nextra_publish.models import EmbedRef, Note, Resource

# ![[target]] or ![[target|alias]]
WIKI_EMBED_PATTERN = re.compile(r"!\[\[([^\]|]+)(?:\|[^\]]*)?\]\]")

# ![alt](target) or ![alt](target "title")
MARKDOWN_EMBED_PATTERN = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")


def parse_frontmatter(content: str) -> dict[str, Any]:
    """Parse YAML front-matter, returning an empty dict when absent or invalid."""
    if not content.startswith("---"):
        return {}

    parts = content.split("---\n", 2)
    if len(parts) < 3:
        return {}

    try:
        frontmatter = yaml.safe_load(parts[1])
    except yaml.YAMLError as e:
        logger.warning("Failed to parse front-matter YAML: {}", e)
        return {}
    if not isinstance(frontmatter, dict):
        return {}
    return frontmatter


def parse_embeds(content: str) -> tuple[EmbedRef, ...]:
    """Find embeds in order of appearance. External URLs are not embeds."""
    found: list[tuple[int, EmbedRef]] = []
    for match in WIKI_EMBED_PATTERN.finditer(content):
        found.append((match.start(), EmbedRef(original=match.group(0), link=match.group(1).strip())))
    for match in MARKDOWN_EMBED_PATTERN.finditer(content):
        target = match.group(1)
        if "://" in target or target.startswith("data:"):
            continue
        found.append((match.start(), EmbedRef(original=match.group(0), link=unquote(target))))
    found.sort(key=lambda x: x[0])
    return tuple(embed for _, embed in found)


def _is_hidden(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


class VaultNoteSource:
    """Read notes and embedded files from a vault directory."""

    def __init__(self, vault_path: str | Path) -> None:
        self.vault_path = Path(vault_path).expanduser().resolve()
        if not self.vault_path.is_dir():
            msg = f"Vault directory {str(self.vault_path)!r} not found"
            raise ValueError(msg)
        self._files: list[str] | None = None
        self._file_set: frozenset[str] = frozenset()
        self._files_lock = threading.Lock()

    def _all_files(self) -> list[str]:
        """Vault-relative paths of all non-hidden files, built once."""
        with self._files_lock:
            if self._files is None:
                files = []
                for path in self.vault_path.rglob("*"):
                    rel = path.relative_to(self.vault_path)
                    if path.is_file() and not _is_hidden(rel):
                        files.append(rel.as_posix())
                self._files = sorted(files)
                self._file_set = frozenset(files)
                logger.debug("Indexed {} vault files", len(self._files))
            return self._files

    def read_note(self, rel_path: str) -> Note:
        """Read a single note by vault-relative path."""
        path = self.vault_path / rel_path
        content = path.read_text(encoding="utf-8")
        return Note(
            path=Path(rel_path).as_posix(),
            name=path.name,
            content=content,
            frontmatter=parse_frontmatter(content),
            embeds=parse_embeds(content),
        )

    def _try_read_note(self, rel_path: str) -> Note | None:
        try:
            return self.read_note(rel_path)
        except UnicodeDecodeError as e:
            logger.warning("Skipping {!r}: not valid UTF-8 ({})", rel_path, e)
            return None

    def list_notes(self) -> list[Note]:
        """Read every note concurrently; results keep sorted path order.

        Notes that are not valid UTF-8 are skipped with a warning.
        """
        md_paths = [p for p in self._all_files() if p.endswith(".md")]
        with ThreadPoolExecutor() as pool:
            return [note for note in pool.map(self._try_read_note, md_paths) if note is not None]

    def resolve_embed(self, note: Note, link: str) -> Resource | None:
        """Resolve a link the way Obsidian does for embeds.

        Tries the note's folder, then the vault root, then the shortest vault
        path with the same file name.
        """
        target = link.split("#", 1)[0].strip().replace("\\", "/")
        if not target:
            return None

        candidates = [
            posixpath.normpath(posixpath.join(posixpath.dirname(note.path), target)),
            posixpath.normpath(target.lstrip("/")),
        ]
        files = self._all_files()
        for candidate in candidates:
            if candidate.startswith("..") or candidate not in self._file_set:
                continue
            return self._resource(candidate)

        name = posixpath.basename(target)
        matches = [p for p in files if posixpath.basename(p) == name]
        if not matches:
            return None
        return self._resource(min(matches, key=lambda p: (p.count("/"), p)))

    def _resource(self, rel_path: str) -> Resource:
        return Resource(path=rel_path, content=(self.vault_path / rel_path).read_bytes())
