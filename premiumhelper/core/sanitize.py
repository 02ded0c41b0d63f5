"""Content sanitization for editor content and model output."""

import html
import re

import bleach


class Sanitizer:
    """Conversions between rich-text editor HTML and plain text.

    Editor content is HTML; the analysis works on plain text, and model
    output must never reach an editor as live markup. Paragraphs are
    separated by a blank line in both directions.
    """

    # Block-level tags are resolved before bleach sees them, since some
    # bleach releases add their own newlines when stripping blocks.
    _BLOCK_TAGS = r"p|div|li|ul|ol|blockquote|h[1-6]"
    _BLOCK_OPEN = re.compile(rf"(?i)<\s*({_BLOCK_TAGS})(\s[^>]*)?>")
    _BLOCK_CLOSE = re.compile(rf"(?i)<\s*/\s*({_BLOCK_TAGS})\s*>")
    _LINE_BREAK = re.compile(r"(?i)<\s*br\s*/?\s*>")
    _TRAILING_SPACE = re.compile(r"[ \t]+\n")
    _BLANK_LINES = re.compile(r"\n{3,}")

    def to_text(self, content: str) -> str:
        """Strip markup from editor content, keeping paragraph breaks."""
        if not content:
            return ""
        content = self._BLOCK_CLOSE.sub("\n\n", content)
        content = self._BLOCK_OPEN.sub("\n\n", content)
        content = self._LINE_BREAK.sub("\n", content)
        stripped = bleach.clean(content, tags=[], attributes={}, strip=True)
        text = html.unescape(stripped)
        text = self._TRAILING_SPACE.sub("\n", text)
        return self._BLANK_LINES.sub("\n\n", text).strip()

    def to_editor_html(self, text: str) -> str:
        """Wrap plain text into escaped paragraphs for an editor."""
        paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text or "") if p.strip()]
        return "".join(
            f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs
        )
