"""Rewrite embedded images of a note into hosted-asset links."""

import posixpath

from loguru import logger

from nextra_publish.core.paths import commit_message, encode_uri, markdown_upload_path
from nextra_publish.models import ItemKind, Note, PublishItem, ResolvedImage
from nextra_publish.protocols import NoteSourceProtocol

# Uploaded images live under this folder of the image publish prefix.
IMAGE_FOLDER = "img"


def image_upload_path(link: str) -> str:
    """Upload path of an embed, relative to the image publish prefix.

    Leading slashes and ".." segments are dropped so the result always stays
    inside the image folder.
    """
    target = link.split("#", 1)[0].strip().replace("\\", "/")
    parts = [p for p in posixpath.normpath(target).split("/") if p not in ("", ".", "..")]
    return posixpath.join(IMAGE_FOLDER, *parts)


def image_markdown(name: str, upload_path: str) -> str:
    return f"![{name}]({encode_uri(upload_path)})"


def resolve_images(note: Note, source: NoteSourceProtocol) -> list[ResolvedImage]:
    """Resolve a note's embeds to image files.

    Embeds that do not resolve, and embeds of other notes, are skipped;
    their markup stays in the text untouched.
    """
    images: list[ResolvedImage] = []
    for embed in note.embeds:
        resource = source.resolve_embed(note, embed.link)
        if resource is None:
            logger.debug("Skipping unresolved embed {!r} in {!r}", embed.link, note.path)
            continue
        if posixpath.splitext(resource.path)[1].lower() == ".md":
            logger.debug("Skipping note embed {!r} in {!r}", embed.link, note.path)
            continue

        upload_path = image_upload_path(embed.link)
        images.append(
            ResolvedImage(
                original=embed.original,
                name=embed.link,
                upload_path=upload_path,
                markdown=image_markdown(embed.link, upload_path),
                content=resource.content,
            )
        )
    return images


def rewrite_note(note: Note, images: list[ResolvedImage]) -> PublishItem:
    """Build the markdown item of a note, with every image embed replaced."""
    content = note.content
    for image in images:
        content = content.replace(image.original, image.markdown)

    path = markdown_upload_path(note)
    return PublishItem(
        path=path,
        kind=ItemKind.MARKDOWN,
        content=content,
        message=commit_message(ItemKind.MARKDOWN, path),
    )


def collect_images(images: list[ResolvedImage]) -> list[PublishItem]:
    """Turn resolved images into publish items, one per upload path.

    When several embeds share an upload path, the first one seen wins.
    """
    items: dict[str, PublishItem] = {}
    for image in images:
        if image.upload_path in items:
            continue
        items[image.upload_path] = PublishItem(
            path=image.upload_path,
            kind=ItemKind.IMAGE,
            content=image.content,
            message=commit_message(ItemKind.IMAGE, image.upload_path),
        )
    return list(items.values())
