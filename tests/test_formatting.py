"""Unit tests for description formatting and text sanitization."""

import pytest

from jobfeed.normalization.formatting import (
    autop,
    format_description,
    html_to_text,
    sanitize_html,
    sanitize_text,
    sanitize_url,
    strip_tags,
)


class TestSanitizeHtml:
    """Tests for the tag allow-list."""

    def test_allowed_tags_kept(self):
        html = "<p>Role <strong>overview</strong></p><ul><li>Python</li></ul>"
        assert sanitize_html(html) == html

    def test_disallowed_tags_removed_text_kept(self):
        assert sanitize_html("<table><tr><td>Cell</td></tr></table>") == "Cell"

    def test_script_content_dropped(self):
        assert sanitize_html("<p>Hi</p><script>alert('x')</script><style>p{}</style>") == "<p>Hi</p>"

    def test_disallowed_attributes_removed(self):
        result = sanitize_html('<p onclick="evil()" style="color:red">Text</p>')
        assert result == "<p>Text</p>"

    def test_safe_link_kept(self):
        result = sanitize_html('<a href="https://example.com/apply" target="_blank">Apply</a>')
        assert result == '<a href="https://example.com/apply" target="_blank">Apply</a>'

    @pytest.mark.parametrize(
        "href",
        ["javascript:alert(1)", "JaVaScRiPt:alert(1)", "java\tscript:alert(1)", "data:text/html,x"],
    )
    def test_unsafe_href_dropped(self, href):
        assert sanitize_html(f'<a href="{href}">Click</a>') == "<a>Click</a>"

    def test_relative_and_mailto_links_kept(self):
        assert 'href="/jobs/1"' in sanitize_html('<a href="/jobs/1">Job</a>')
        assert 'href="mailto:hr@example.com"' in sanitize_html('<a href="mailto:hr@example.com">HR</a>')

    def test_line_break_normalized(self):
        assert sanitize_html("One<br>Two") == "One<br />Two"

    def test_text_escaped(self):
        assert sanitize_html("Salary &lt; 50k &amp; benefits") == "Salary &lt; 50k &amp; benefits"


class TestAutop:
    """Tests for paragraph wrapping."""

    def test_blocks_wrapped(self):
        assert autop("First\n\nSecond") == "<p>First</p>\n<p>Second</p>"

    def test_single_newline_becomes_break(self):
        assert autop("Line one\nLine two") == "<p>Line one<br />\nLine two</p>"

    def test_block_tags_not_wrapped(self):
        assert autop("<ul><li>A</li></ul>\n\nText") == "<ul><li>A</li></ul>\n<p>Text</p>"

    def test_empty(self):
        assert autop("  \n ") == ""


class TestFormatDescription:
    """Tests for the full description pipeline."""

    def test_plain_text_gets_paragraphs(self):
        assert format_description("Great job\n\nApply today") == "<p>Great job</p>\n<p>Apply today</p>"

    def test_existing_paragraphs_left_alone(self):
        assert format_description("<p>Already</p>\n<p>Formatted</p>") == "<p>Already</p>\n<p>Formatted</p>"

    def test_empty_paragraphs_removed(self):
        assert format_description("<p>Text</p><p>  </p><p></p>") == "<p>Text</p>"

    def test_none_and_empty(self):
        assert format_description(None) == ""
        assert format_description("") == ""


class TestPlainText:
    """Tests for plain-text helpers."""

    def test_strip_tags_keeps_entities(self):
        assert strip_tags("<p>A &amp; B</p><script>x()</script>") == "A &amp; B"

    def test_html_to_text_keeps_structure(self):
        assert html_to_text("<p>One</p><p>Two<br/>Three</p>") == "One\n\nTwo\nThree"

    def test_sanitize_text_single_line(self):
        assert sanitize_text("  <b>Senior</b>\n Developer &amp; Lead ") == "Senior Developer & Lead"

    def test_sanitize_text_empty(self):
        assert sanitize_text(None) == ""


class TestSanitizeUrl:
    """Tests for URL validation."""

    @pytest.mark.parametrize("url", ["https://example.com/job/1", "http://example.com"])
    def test_valid(self, url):
        assert sanitize_url(url) == url

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "/relative/path", "ftp://example.com", "", None])
    def test_invalid(self, url):
        assert sanitize_url(url) == ""

    def test_whitespace_stripped(self):
        assert sanitize_url("  https://example.com  ") == "https://example.com"
