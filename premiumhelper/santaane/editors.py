"""Abstract editors the widget reads from and writes to."""

from pathlib import Path
from typing import Callable

from ..core.sanitize import Sanitizer


# Rich-text editor ids tried in order before falling back to a text area
CANDIDATE_EDITOR_IDS = [
    "titleAbstract-abstract-control-en",
    "abstract-control-en",
    "abstract",
]


class RichTextEditor:
    """A rich-text editor holding HTML content."""

    def __init__(self, editor_id: str, content: str = "", sanitizer: Sanitizer | None = None):
        self.id = editor_id
        self._content = content
        self._listeners: dict[str, list[Callable[["RichTextEditor"], None]]] = {}
        self.sanitizer = sanitizer or Sanitizer()

    def get_content(self, format: str = "html") -> str:
        """Editor content as HTML or, with ``format="text"``, plain text."""
        if format == "text":
            return self.sanitizer.to_text(self._content)
        return self._content

    def set_content(self, content: str) -> None:
        self._content = content

    def on(self, event: str, listener: Callable[["RichTextEditor"], None]) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def fire(self, event: str) -> None:
        for listener in self._listeners.get(event, []):
            listener(self)


class TextArea:
    """A plain form text area."""

    def __init__(self, element_id: str = "", name: str = "", value: str = ""):
        self.id = element_id
        self.name = name
        self.value = value
        self.change_count = 0

    def dispatch_change(self) -> None:
        self.change_count += 1


class FileEditor(RichTextEditor):
    """A rich-text editor backed by a plain-text file.

    The file is rewritten as plain text on every change event.
    """

    def __init__(self, path: Path, editor_id: str = CANDIDATE_EDITOR_IDS[0]):
        super().__init__(editor_id, path.read_text(encoding="utf-8"))
        self.path = path
        self.on("change", lambda editor: self.save())

    def save(self) -> None:
        self.path.write_text(self.get_content(format="text") + "\n", encoding="utf-8")


class EditorRegistry:
    """The editors present on the page the widget runs in."""

    def __init__(self, sanitizer: Sanitizer | None = None):
        self.sanitizer = sanitizer or Sanitizer()
        self.editors: dict[str, RichTextEditor] = {}
        self.text_areas: list[TextArea] = []

    def add_editor(self, editor: RichTextEditor) -> None:
        self.editors[editor.id] = editor

    def add_text_area(self, text_area: TextArea) -> None:
        self.text_areas.append(text_area)

    def find_editor(self) -> RichTextEditor | None:
        """First rich-text editor among the candidate ids."""
        for editor_id in CANDIDATE_EDITOR_IDS:
            if editor_id in self.editors:
                return self.editors[editor_id]
        return None

    def find_text_area(self) -> TextArea | None:
        """First text area whose id or name mentions the abstract."""
        for text_area in self.text_areas:
            if "abstract" in text_area.id.lower() or "abstract" in text_area.name.lower():
                return text_area
        return None

    def read_abstract(self) -> str:
        """Current abstract as plain text ("" when no editor is found)."""
        editor = self.find_editor()
        if editor is not None:
            return editor.get_content(format="text")
        text_area = self.find_text_area()
        if text_area is not None:
            return self.sanitizer.to_text(text_area.value)
        return ""

    def write_abstract(self, text: str) -> bool:
        """Replace the abstract and fire a change notification.

        Returns:
            False if no editor or text area could be found.
        """
        editor = self.find_editor()
        if editor is not None:
            editor.set_content(self.sanitizer.to_editor_html(text))
            editor.fire("change")
            return True
        text_area = self.find_text_area()
        if text_area is not None:
            text_area.value = text
            text_area.dispatch_change()
            return True
        return False
