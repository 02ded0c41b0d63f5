"""Tests for content sanitization."""

from premiumhelper.core.sanitize import Sanitizer


class TestToText:
    """Tests for editor HTML to plain text."""

    def test_strips_inline_tags(self):
        """Test that inline formatting is removed."""
        sanitizer = Sanitizer()
        result = sanitizer.to_text("<p>Hello <strong>world</strong></p>")

        assert result == "Hello world"

    def test_keeps_paragraph_breaks(self):
        """Test that paragraphs are separated by a blank line."""
        sanitizer = Sanitizer()
        result = sanitizer.to_text("<p>First.</p><p>Second.</p>")

        assert result == "First.\n\nSecond."

    def test_source_whitespace_between_blocks(self):
        """Test that newlines between block tags do not widen the gap."""
        sanitizer = Sanitizer()
        result = sanitizer.to_text("<div>\n  <p>First.</p>\n  <p class=\"x\">Second.</p>\n</div>")

        assert result == "First.\n\nSecond."

    def test_list_items(self):
        """Test that list items end up on their own paragraphs."""
        sanitizer = Sanitizer()
        result = sanitizer.to_text("<ul><li>One</li><li>Two</li></ul>")

        assert result == "One\n\nTwo"

    def test_line_breaks(self):
        """Test that <br> tags end a line."""
        sanitizer = Sanitizer()

        assert sanitizer.to_text("one<br>two<br/>three") == "one\ntwo\nthree"

    def test_unescapes_entities(self):
        """Test that entities come back as characters."""
        sanitizer = Sanitizer()

        assert sanitizer.to_text("<p>Fish &amp; chips &lt;3</p>") == "Fish & chips <3"

    def test_removes_script_markup(self):
        """Test that script tags never survive as markup."""
        sanitizer = Sanitizer()
        result = sanitizer.to_text("<p>Hi</p><script>alert(1)</script>")

        assert "<script>" not in result

    def test_empty(self):
        """Test empty content."""
        assert Sanitizer().to_text("") == ""


class TestToEditorHTML:
    """Tests for plain text to editor HTML."""

    def test_wraps_paragraphs(self):
        """Test that blank lines separate paragraphs."""
        sanitizer = Sanitizer()
        result = sanitizer.to_editor_html("First paragraph.\n\nSecond paragraph.")

        assert result == "<p>First paragraph.</p><p>Second paragraph.</p>"

    def test_escapes_markup(self):
        """Test that model output cannot inject markup."""
        sanitizer = Sanitizer()
        result = sanitizer.to_editor_html('<img src=x onerror="alert(1)">')

        assert "<img" not in result
        assert result.startswith("<p>&lt;img")

    def test_single_newlines_become_breaks(self):
        """Test that single newlines are kept as <br>."""
        sanitizer = Sanitizer()

        assert sanitizer.to_editor_html("a\nb") == "<p>a<br>b</p>"

    def test_blank_text(self):
        """Test that whitespace-only text yields nothing."""
        assert Sanitizer().to_editor_html("  \n\n ") == ""

    def test_text_survives_both_directions(self):
        """Test that editor HTML converts back to the same text."""
        sanitizer = Sanitizer()
        text = "Results & methods <improved>."

        assert sanitizer.to_text(sanitizer.to_editor_html(text)) == text

    def test_paragraphs_survive_both_directions(self):
        """Test that paragraph breaks survive editor HTML and back."""
        sanitizer = Sanitizer()
        text = "First paragraph.\n\nSecond line one\nline two."

        assert sanitizer.to_text(sanitizer.to_editor_html(text)) == text
