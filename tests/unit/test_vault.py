"""Tests for the vault note source."""

from pathlib import Path

import pytest

from nextra_publish.models import EmbedRef
from nextra_publish.vault import VaultNoteSource, parse_embeds, parse_frontmatter
from tests.unit.fakes import PNG_BYTES


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """A small vault with nested notes, attachments and a hidden config dir."""
    (tmp_path / "notes").mkdir()
    (tmp_path / "assets").mkdir()
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / "index.md").write_text("---\nnextra-publish: true\n---\n# Index\n![[diagram.png]]\n")
    (tmp_path / "notes" / "deep.md").write_text("![[local.png]] ![[assets/diagram.png]]")
    (tmp_path / "notes" / "local.png").write_bytes(b"local")
    (tmp_path / "assets" / "diagram.png").write_bytes(PNG_BYTES)
    (tmp_path / ".obsidian" / "workspace.md").write_text("hidden")
    return tmp_path


def test_parse_frontmatter() -> None:
    assert parse_frontmatter("---\nnextra-publish: true\ntags: [a]\n---\nbody") == {
        "nextra-publish": True,
        "tags": ["a"],
    }


@pytest.mark.parametrize(
    "content",
    [
        "no front-matter",
        "---\nunterminated",
        "---\n- just\n- a list\n---\nbody",
        "---\nkey: [unclosed\n---\nbody",
    ],
)
def test_parse_frontmatter_falls_back_to_empty(content: str) -> None:
    assert parse_frontmatter(content) == {}


def test_parse_embeds_in_order_of_appearance() -> None:
    content = '![alt](img/a%20b.png "title") then ![[c.png|300]] and ![ext](https://x.org/y.png) ![[d.png#frag]]'

    embeds = parse_embeds(content)

    assert embeds == (
        EmbedRef(original='![alt](img/a%20b.png "title")', link="img/a b.png"),
        EmbedRef(original="![[c.png|300]]", link="c.png"),
        EmbedRef(original="![[d.png#frag]]", link="d.png#frag"),
    )


def test_plain_links_are_not_embeds() -> None:
    assert parse_embeds("[[Other]] and [text](a.png)") == ()


def test_list_notes_skips_hidden_directories(vault: Path) -> None:
    notes = VaultNoteSource(vault).list_notes()

    assert [n.path for n in notes] == ["index.md", "notes/deep.md"]
    index = notes[0]
    assert index.name == "index.md"
    assert index.frontmatter == {"nextra-publish": True}
    assert index.embeds == (EmbedRef(original="![[diagram.png]]", link="diagram.png"),)


def test_resolve_embed_prefers_note_folder_then_root_then_basename(vault: Path) -> None:
    source = VaultNoteSource(vault)
    deep = source.read_note("notes/deep.md")
    index = source.read_note("index.md")

    local = source.resolve_embed(deep, "local.png")
    rooted = source.resolve_embed(deep, "assets/diagram.png")
    by_name = source.resolve_embed(index, "diagram.png")

    assert local is not None and local.path == "notes/local.png" and local.content == b"local"
    assert rooted is not None and rooted.path == "assets/diagram.png"
    assert by_name is not None and by_name.path == "assets/diagram.png"
    assert by_name.content == PNG_BYTES


def test_resolve_embed_picks_shortest_basename_match(vault: Path) -> None:
    (vault / "notes" / "diagram.png").write_bytes(b"nested copy")
    source = VaultNoteSource(vault)
    index = source.read_note("index.md")

    resolved = source.resolve_embed(index, "diagram.png#section")

    assert resolved is not None
    assert resolved.path == "assets/diagram.png"


def test_resolve_embed_unknown_or_escaping_link(vault: Path) -> None:
    source = VaultNoteSource(vault)
    index = source.read_note("index.md")

    assert source.resolve_embed(index, "missing.png") is None
    assert source.resolve_embed(index, "") is None
    assert source.resolve_embed(index, "../../etc/passwd") is None


def test_missing_vault_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        VaultNoteSource(tmp_path / "nope")


def test_undecodable_note_is_skipped(vault: Path) -> None:
    (vault / "legacy.md").write_bytes(b"caf\xe9 notes")

    notes = VaultNoteSource(vault).list_notes()

    assert [n.path for n in notes] == ["index.md", "notes/deep.md"]
