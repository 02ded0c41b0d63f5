"""The abstract analysis widget: analyze, review, apply.

The widget is idle or analyzing. A successful analysis sets a result that
``apply_enhanced_version`` may later write into the abstract editor after
the user confirms.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..core.logging import analysis_logger as logger
from .analysis import AnalysisResult
from .client import AbstractAnalyzer
from .editors import EditorRegistry
from .errors import SantaaneError
from .notifications import NotificationCenter, NotificationType


REPLACE_TITLE = "Replace Abstract?"
REPLACE_MESSAGE = (
    "Are you sure you want to replace your current abstract with the AI-enhanced version?"
)


class WidgetState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"


class ConfirmOutcome(str, Enum):
    """How a confirmation prompt was closed."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    BACKDROP = "backdrop"
    ESCAPE = "escape"

    @property
    def confirmed(self) -> bool:
        return self is ConfirmOutcome.CONFIRMED


class ConfirmDialog(Protocol):
    """A blocking yes/no prompt."""

    async def ask(self, title: str, message: str) -> ConfirmOutcome: ...


@dataclass
class ResultPanel:
    """What the widget currently shows to the user."""

    busy: bool = False
    trigger_enabled: bool = True
    visible: bool = False
    word_count: str = ""
    sentence_count: str = ""
    clarity_score: str = ""
    keywords: list[tuple[str, bool]] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    enhanced_text: str = ""
    timestamp: str = ""

    def show_busy(self, busy: bool) -> None:
        self.busy = busy
        self.trigger_enabled = not busy

    def hide(self) -> None:
        self.visible = False

    def show(self, result: AnalysisResult) -> None:
        self.word_count = str(result.word_count)
        self.sentence_count = str(result.sentence_count)
        self.clarity_score = f"{result.clarity_score:g}%"
        self.keywords = list(result.keyword_check.items())
        self.suggestions = list(result.suggestions)
        self.enhanced_text = result.ai_enhanced or "No enhanced version available."
        self.timestamp = result.display_timestamp()
        self.visible = True


class AnalysisWidget:
    """Runs analyses of the page's abstract and applies the rewrite."""

    def __init__(
        self,
        editors: EditorRegistry,
        analyzer: AbstractAnalyzer,
        notifications: NotificationCenter,
        confirm: ConfirmDialog,
        panel: ResultPanel | None = None,
    ):
        self.editors = editors
        self.analyzer = analyzer
        self.notifications = notifications
        self.confirm = confirm
        self.panel = panel or ResultPanel()
        self.state = WidgetState.IDLE
        self.result: AnalysisResult | None = None

    @property
    def has_result(self) -> bool:
        return self.result is not None

    async def run_analysis(self) -> AnalysisResult | None:
        """Analyze the current abstract.

        Returns:
            The new result, or None if the analysis did not complete.
        """
        if self.state is WidgetState.ANALYZING:
            # Trigger is disabled while a call is pending
            return None

        self.state = WidgetState.ANALYZING
        self.panel.show_busy(True)
        self.panel.hide()
        try:
            text = self.editors.read_abstract()
            result = await self.analyzer.analyze(text)
        except SantaaneError as e:
            logger.warning(f"Analysis error: {e}")
            self.notifications.notify(str(e), NotificationType.ERROR)
            return None
        finally:
            self.state = WidgetState.IDLE
            self.panel.show_busy(False)

        self.result = result
        self.panel.show(result)
        return result

    async def apply_enhanced_version(self) -> bool:
        """Replace the abstract with the enhanced text after confirmation.

        Returns:
            True if the editor content was replaced.
        """
        if self.result is None or not self.result.ai_enhanced:
            self.notifications.notify(
                "No enhanced version available to apply.", NotificationType.WARNING
            )
            return False

        outcome = await self.confirm.ask(REPLACE_TITLE, REPLACE_MESSAGE)
        if not outcome.confirmed:
            return False

        if not self.editors.write_abstract(self.result.ai_enhanced):
            self.notifications.notify(
                "Could not find the abstract editor.", NotificationType.ERROR
            )
            return False

        self.notifications.success_toast(
            "Abstract successfully updated with AI-enhanced version!"
        )
        return True
