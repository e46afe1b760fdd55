"""Portable Text to HTML rendering.

Post bodies are stored as Portable Text: a list of blocks, each with a
``style`` (``normal``, ``h1``...), optional ``listItem``, ``markDefs`` for
annotations such as links, and ``children`` spans carrying ``marks``.

Post pages use a fixed set of renderers for headings, paragraphs, list
items and links. Everything else goes through the default renderers.
"""

import html
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from src.content.images import ImageUrlBuilder, InvalidImageReferenceError


logger = structlog.get_logger(__name__)

BlockRenderer = Callable[[str], str]
MarkRenderer = Callable[[str, dict[str, Any]], str]
TypeRenderer = Callable[[dict[str, Any]], str]

UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:", "data:")


def escape(value: Any) -> str:
    """HTML-escape a value (quotes included)."""
    return html.escape(str(value), quote=True)


def safe_href(href: Any) -> str | None:
    """Return an escaped href, or None for empty or script URLs."""
    if not href:
        return None
    if str(href).strip().lower().startswith(UNSAFE_URL_SCHEMES):
        return None
    return escape(href)


# ==============================================================================
# Post page renderers
# ==============================================================================

POST_BLOCK_RENDERERS: dict[str, BlockRenderer] = {
    "h1": lambda children: f'<h1 class="text-2xl font-bold my-5">{children}</h1>',
    "h2": lambda children: f'<h2 class="text-xl font-bold my-5">{children}</h2>',
    "normal": lambda children: f'<p class="mt-5">{children}</p>',
}


def render_post_list_item(children: str) -> str:
    return f'<li class="ml-4 list-disc">{children}</li>'


def render_post_link(children: str, mark_def: dict[str, Any]) -> str:
    href = safe_href(mark_def.get("href"))
    if href is None:
        return children
    return f'<a href="{href}" class="text-blue-500 hover:underline">{children}</a>'


POST_MARK_RENDERERS: dict[str, MarkRenderer] = {
    "link": render_post_link,
}


# ==============================================================================
# Default renderers
# ==============================================================================


def _tag(name: str) -> BlockRenderer:
    return lambda children: f"<{name}>{children}</{name}>"


DEFAULT_BLOCK_RENDERERS: dict[str, BlockRenderer] = {
    "normal": _tag("p"),
    "h1": _tag("h1"),
    "h2": _tag("h2"),
    "h3": _tag("h3"),
    "h4": _tag("h4"),
    "h5": _tag("h5"),
    "h6": _tag("h6"),
    "blockquote": _tag("blockquote"),
}


def render_default_link(children: str, mark_def: dict[str, Any]) -> str:
    href = safe_href(mark_def.get("href"))
    if href is None:
        return children
    return f'<a href="{href}">{children}</a>'


DEFAULT_MARK_RENDERERS: dict[str, MarkRenderer] = {
    "strong": lambda children, _: f"<strong>{children}</strong>",
    "em": lambda children, _: f"<em>{children}</em>",
    "code": lambda children, _: f"<code>{children}</code>",
    "underline": lambda children, _: f'<span style="text-decoration: underline">{children}</span>',
    "strike-through": lambda children, _: f"<del>{children}</del>",
    "link": render_default_link,
}

LIST_TAGS = {"bullet": "ul", "number": "ol"}


class PortableTextRenderer:
    """Render Portable Text blocks to HTML.

    ``block_renderers`` and ``mark_renderers`` take precedence over the
    defaults; styles, marks and types with no renderer fall back to the
    default ones.
    """

    def __init__(
        self,
        block_renderers: Mapping[str, BlockRenderer] | None = None,
        mark_renderers: Mapping[str, MarkRenderer] | None = None,
        list_item_renderer: BlockRenderer | None = None,
        type_renderers: Mapping[str, TypeRenderer] | None = None,
        image_builder: ImageUrlBuilder | None = None,
    ) -> None:
        self.block_renderers = {**DEFAULT_BLOCK_RENDERERS, **(block_renderers or {})}
        self.mark_renderers = {**DEFAULT_MARK_RENDERERS, **(mark_renderers or {})}
        self.list_item_renderer = list_item_renderer or _tag("li")
        self.image_builder = image_builder
        self.type_renderers: dict[str, TypeRenderer] = {
            "image": self.render_image,
            **(type_renderers or {}),
        }

    def render(self, blocks: list[dict[str, Any]] | None) -> str:
        """Render a list of blocks to an HTML string."""
        parts: list[str] = []
        list_tag: str | None = None

        for block in blocks or []:
            item_type = block.get("listItem") if block.get("_type") == "block" else None
            tag = LIST_TAGS.get(item_type, "ul") if item_type else None

            if tag != list_tag:
                if list_tag:
                    parts.append(f"</{list_tag}>")
                if tag:
                    parts.append(f"<{tag}>")
                list_tag = tag

            if item_type:
                parts.append(self.list_item_renderer(self.render_children(block)))
            else:
                parts.append(self.render_block(block))

        if list_tag:
            parts.append(f"</{list_tag}>")

        return "".join(parts)

    def render_block(self, block: dict[str, Any]) -> str:
        """Render one non-list block."""
        block_type = block.get("_type", "block")

        if block_type != "block":
            renderer = self.type_renderers.get(block_type)
            if renderer is None:
                logger.debug("portable_text_unknown_type", block_type=block_type)
                return ""
            return renderer(block)

        style = block.get("style") or "normal"
        renderer = self.block_renderers.get(style)
        if renderer is None:
            logger.debug("portable_text_unknown_style", style=style)
            renderer = self.block_renderers["normal"]
        return renderer(self.render_children(block))

    def render_children(self, block: dict[str, Any]) -> str:
        """Render the spans of a block, applying decorators and annotations."""
        mark_defs = {
            mark_def.get("_key"): mark_def for mark_def in block.get("markDefs") or []
        }
        rendered: list[str] = []

        for child in block.get("children") or []:
            if child.get("_type", "span") != "span":
                rendered.append(self.render_block(child))
                continue

            text = escape(child.get("text") or "").replace("\n", "<br/>")
            # Innermost mark is the last one listed
            for mark in reversed(child.get("marks") or []):
                text = self.apply_mark(text, mark, mark_defs)
            rendered.append(text)

        return "".join(rendered)

    def apply_mark(
        self, text: str, mark: str, mark_defs: dict[str, dict[str, Any]]
    ) -> str:
        """Wrap text in the renderer for a decorator or annotation key."""
        mark_def = mark_defs.get(mark)
        if mark_def is not None:
            renderer = self.mark_renderers.get(mark_def.get("_type", ""))
            if renderer is None:
                logger.debug("portable_text_unknown_annotation", mark=mark_def.get("_type"))
                return text
            return renderer(text, mark_def)

        renderer = self.mark_renderers.get(mark)
        if renderer is None:
            logger.debug("portable_text_unknown_mark", mark=mark)
            return text
        return renderer(text, {})

    def render_image(self, block: dict[str, Any]) -> str:
        """Render an inline image block through the image URL builder."""
        if self.image_builder is None:
            return ""
        try:
            src = self.image_builder.url(block)
        except InvalidImageReferenceError as e:
            logger.warning("portable_text_invalid_image", ref=e.ref)
            return ""
        if src is None:
            return ""
        alt = escape(block.get("alt") or "")
        return f'<figure><img src="{escape(src)}" alt="{alt}"/></figure>'


def post_body_renderer(image_builder: ImageUrlBuilder | None = None) -> PortableTextRenderer:
    """Renderer configured with the post page's fixed block renderers."""
    return PortableTextRenderer(
        block_renderers=POST_BLOCK_RENDERERS,
        mark_renderers=POST_MARK_RENDERERS,
        list_item_renderer=render_post_list_item,
        image_builder=image_builder,
    )
