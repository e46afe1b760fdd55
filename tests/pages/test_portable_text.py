"""Tests for Portable Text rendering."""

from src.content.images import ImageUrlBuilder
from src.pages.portable_text import PortableTextRenderer, post_body_renderer


def block(style: str, *spans: dict, mark_defs: list | None = None, **extra) -> dict:
    return {
        "_type": "block",
        "style": style,
        "markDefs": mark_defs or [],
        "children": list(spans),
        **extra,
    }


def span(text: str, *marks: str) -> dict:
    return {"_type": "span", "text": text, "marks": list(marks)}


class TestPostBodyRenderers:
    """The post page maps each block type to its fixed renderer."""

    def test_heading_paragraph_and_link(self):
        body = [
            block("h1", span("Title")),
            block("h2", span("Subtitle")),
            block(
                "normal",
                span("Read "),
                span("the docs", "lnk1"),
                mark_defs=[{"_key": "lnk1", "_type": "link", "href": "https://example.com"}],
            ),
        ]

        html = post_body_renderer().render(body)

        assert '<h1 class="text-2xl font-bold my-5">Title</h1>' in html
        assert '<h2 class="text-xl font-bold my-5">Subtitle</h2>' in html
        assert html.count('<p class="mt-5">') == 1
        assert (
            '<a href="https://example.com" class="text-blue-500 hover:underline">'
            "the docs</a>"
        ) in html

    def test_list_items_are_grouped(self):
        body = [
            block("normal", span("one"), listItem="bullet", level=1),
            block("normal", span("two"), listItem="bullet", level=1),
            block("normal", span("after")),
        ]

        html = post_body_renderer().render(body)

        assert html == (
            '<ul><li class="ml-4 list-disc">one</li>'
            '<li class="ml-4 list-disc">two</li></ul>'
            '<p class="mt-5">after</p>'
        )

    def test_numbered_list(self):
        html = post_body_renderer().render(
            [block("normal", span("first"), listItem="number")]
        )

        assert html.startswith("<ol>")
        assert html.endswith("</ol>")


class TestDefaultRenderers:
    """Styles and marks outside the fixed set use the defaults."""

    def test_unknown_heading_levels_fall_back(self):
        html = post_body_renderer().render([block("h3", span("Small"))])

        assert html == "<h3>Small</h3>"

    def test_blockquote(self):
        html = post_body_renderer().render([block("blockquote", span("Quote"))])

        assert html == "<blockquote>Quote</blockquote>"

    def test_unknown_style_renders_as_paragraph(self):
        html = post_body_renderer().render([block("fancy", span("x"))])

        assert html == '<p class="mt-5">x</p>'

    def test_decorators(self):
        html = PortableTextRenderer().render(
            [block("normal", span("bold", "strong"), span("both", "strong", "em"))]
        )

        assert html == "<p><strong>bold</strong><strong><em>both</em></strong></p>"

    def test_unknown_type_renders_nothing(self):
        html = PortableTextRenderer().render([{"_type": "codeSandbox", "id": "x"}])

        assert html == ""

    def test_image_block_uses_image_builder(self):
        renderer = post_body_renderer(ImageUrlBuilder("testproj", "production"))

        html = renderer.render(
            [{"_type": "image", "asset": {"_ref": "image-abc123-10x20-png"}, "alt": "A"}]
        )

        assert (
            '<img src="https://cdn.sanity.io/images/testproj/production/abc123-10x20.png" alt="A"/>'
            in html
        )


class TestEscaping:
    """Content is escaped and script links are dropped."""

    def test_text_is_escaped(self):
        html = PortableTextRenderer().render([block("normal", span("<script>x</script>"))])

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_javascript_links_are_dropped(self):
        html = post_body_renderer().render(
            [
                block(
                    "normal",
                    span("click", "k"),
                    mark_defs=[{"_key": "k", "_type": "link", "href": "javascript:alert(1)"}],
                )
            ]
        )

        assert "<a" not in html
        assert "click" in html

    def test_null_span_text_renders_empty(self):
        html = PortableTextRenderer().render(
            [block("normal", {"_type": "span", "text": None, "marks": ["strong"]}, span("after"))]
        )

        assert "None" not in html
        assert "<strong></strong>after" in html
