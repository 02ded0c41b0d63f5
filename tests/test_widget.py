"""Tests for the analysis widget, editors and notifications."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from premiumhelper.santaane.analysis import AnalysisResult
from premiumhelper.santaane.editors import EditorRegistry, FileEditor, RichTextEditor, TextArea
from premiumhelper.santaane.errors import AbstractValidationError, AIServiceError
from premiumhelper.santaane.notifications import (
    ALERT_SECONDS,
    TOAST_SECONDS,
    NotificationCenter,
    NotificationType,
)
from premiumhelper.santaane.widget import (
    REPLACE_TITLE,
    AnalysisWidget,
    ConfirmOutcome,
    WidgetState,
)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def make_result(enhanced: str = "Improved abstract.") -> AnalysisResult:
    return AnalysisResult(
        word_count=10,
        sentence_count=2,
        clarity_score=82.5,
        suggestions=["Be concise."],
        ai_enhanced=enhanced,
        analysis_timestamp="2024-03-01T12:30:00+00:00",
        keyword_check={"ethics": True},
        status=True,
    )


def make_confirm(outcome: ConfirmOutcome):
    confirm = MagicMock()
    confirm.ask = AsyncMock(return_value=outcome)
    return confirm


def make_widget(editors=None, analyzer=None, confirm=None, clock=None):
    if editors is None:
        editors = EditorRegistry()
        editors.add_editor(RichTextEditor("titleAbstract-abstract-control-en", "<p>Original.</p>"))
    if analyzer is None:
        analyzer = MagicMock()
        analyzer.analyze = AsyncMock(return_value=make_result())
    return AnalysisWidget(
        editors=editors,
        analyzer=analyzer,
        notifications=NotificationCenter(clock=clock or FakeClock()),
        confirm=confirm or make_confirm(ConfirmOutcome.CONFIRMED),
    )


class TestRunAnalysis:
    """Tests for triggering an analysis."""

    def test_success_shows_results(self):
        """Test a completed analysis fills the panel."""
        widget = make_widget()

        result = asyncio.run(widget.run_analysis())

        assert result is widget.result
        widget.analyzer.analyze.assert_awaited_once_with("Original.")
        assert widget.state is WidgetState.IDLE
        assert widget.panel.visible
        assert widget.panel.trigger_enabled
        assert widget.panel.clarity_score == "82.5%"
        assert widget.panel.keywords == [("ethics", True)]
        assert widget.panel.timestamp == "Analysis completed on 2024-03-01 12:30:00"

    def test_blank_abstract_notifies_error(self):
        """Test a validation error returns the widget to idle."""
        analyzer = MagicMock()
        analyzer.analyze = AsyncMock(
            side_effect=AbstractValidationError("Please enter an abstract to analyze.")
        )
        widget = make_widget(analyzer=analyzer)

        assert asyncio.run(widget.run_analysis()) is None

        assert widget.state is WidgetState.IDLE
        assert not widget.panel.visible
        assert widget.panel.trigger_enabled
        [notification] = widget.notifications.active
        assert notification.type is NotificationType.ERROR
        assert notification.message == "Please enter an abstract to analyze."

    def test_service_error_keeps_previous_result(self):
        """Test a failed call does not discard the last good result."""
        widget = make_widget()
        first = asyncio.run(widget.run_analysis())
        widget.analyzer.analyze = AsyncMock(side_effect=AIServiceError("Analysis failed: 500"))

        assert asyncio.run(widget.run_analysis()) is None

        assert widget.result is first
        assert widget.notifications.active[-1].message == "Analysis failed: 500"

    def test_overlapping_trigger_is_ignored(self):
        """Test a second trigger during a pending call does nothing."""

        async def scenario():
            release = asyncio.Event()

            async def slow_analyze(text):
                await release.wait()
                return make_result()

            analyzer = MagicMock()
            analyzer.analyze = AsyncMock(side_effect=slow_analyze)
            widget = make_widget(analyzer=analyzer)

            first = asyncio.create_task(widget.run_analysis())
            await asyncio.sleep(0)
            assert widget.state is WidgetState.ANALYZING
            assert not widget.panel.trigger_enabled

            second = await widget.run_analysis()
            release.set()
            return widget, await first, second

        widget, first, second = asyncio.run(scenario())

        assert second is None
        assert first is not None
        assert widget.analyzer.analyze.await_count == 1


class TestApplyEnhanced:
    """Tests for replacing the abstract."""

    def test_without_result_warns(self):
        """Test applying before any analysis leaves the editor alone."""
        widget = make_widget()
        editor = widget.editors.find_editor()

        assert asyncio.run(widget.apply_enhanced_version()) is False

        assert editor.get_content() == "<p>Original.</p>"
        widget.confirm.ask.assert_not_awaited()
        [notification] = widget.notifications.active
        assert notification.type is NotificationType.WARNING
        assert notification.message == "No enhanced version available to apply."

    def test_confirmed_replaces_editor(self):
        """Test confirmation writes the text and fires a change event."""
        widget = make_widget()
        editor = widget.editors.find_editor()
        changes = []
        editor.on("change", changes.append)
        asyncio.run(widget.run_analysis())

        assert asyncio.run(widget.apply_enhanced_version()) is True

        assert editor.get_content() == "<p>Improved abstract.</p>"
        assert changes == [editor]
        assert widget.confirm.ask.await_args[0][0] == REPLACE_TITLE
        toast = widget.notifications.active[-1]
        assert toast.type is NotificationType.SUCCESS
        assert toast.lifetime == TOAST_SECONDS

    @pytest.mark.parametrize(
        "outcome",
        [ConfirmOutcome.CANCELLED, ConfirmOutcome.BACKDROP, ConfirmOutcome.ESCAPE],
    )
    def test_dismissed_prompt_changes_nothing(self, outcome):
        """Test every way of closing the prompt without confirming."""
        widget = make_widget(confirm=make_confirm(outcome))
        editor = widget.editors.find_editor()
        asyncio.run(widget.run_analysis())

        assert asyncio.run(widget.apply_enhanced_version()) is False

        assert editor.get_content() == "<p>Original.</p>"
        assert widget.notifications.active == []

    def test_text_area_fallback(self):
        """Test a plain abstract text area is used without an editor."""
        editors = EditorRegistry()
        editors.add_text_area(TextArea("title", "title", "My title"))
        text_area = TextArea("submission-abstract", "abstract", "Original.")
        editors.add_text_area(text_area)
        widget = make_widget(editors=editors)
        asyncio.run(widget.run_analysis())

        assert asyncio.run(widget.apply_enhanced_version()) is True

        widget.analyzer.analyze.assert_awaited_once_with("Original.")
        assert text_area.value == "Improved abstract."
        assert text_area.change_count == 1

    def test_no_editor_found(self):
        """Test a missing editor is reported after confirmation."""
        analyzer = MagicMock()
        analyzer.analyze = AsyncMock(return_value=make_result())
        widget = make_widget(editors=EditorRegistry(), analyzer=analyzer)
        widget.result = make_result()

        assert asyncio.run(widget.apply_enhanced_version()) is False

        assert widget.notifications.active[-1].message == "Could not find the abstract editor."

    def test_markup_in_enhanced_text_is_escaped(self):
        """Test model output never reaches the editor as markup."""
        widget = make_widget()
        widget.result = make_result(enhanced="<script>alert(1)</script>")

        asyncio.run(widget.apply_enhanced_version())

        content = widget.editors.find_editor().get_content()
        assert "<script>" not in content
        assert "&lt;script&gt;" in content


class TestEditorRegistry:
    """Tests for locating the abstract editor."""

    def test_candidate_order(self):
        """Test the first candidate id wins."""
        editors = EditorRegistry()
        editors.add_editor(RichTextEditor("abstract", "<p>third</p>"))
        editors.add_editor(RichTextEditor("abstract-control-en", "<p>second</p>"))

        assert editors.read_abstract() == "second"

    def test_unrelated_editor_is_ignored(self):
        """Test editors with other ids are not used."""
        editors = EditorRegistry()
        editors.add_editor(RichTextEditor("title-control-en", "<p>title</p>"))

        assert editors.find_editor() is None
        assert editors.read_abstract() == ""
        assert editors.write_abstract("x") is False

    def test_file_editor_saves_on_change(self, tmp_path):
        """Test a file-backed editor persists applied text."""
        path = tmp_path / "abstract.txt"
        path.write_text("Old text.\n", encoding="utf-8")
        editors = EditorRegistry()
        editors.add_editor(FileEditor(path))

        assert editors.read_abstract() == "Old text."
        editors.write_abstract("New & better.")

        assert path.read_text(encoding="utf-8") == "New & better.\n"


class TestNotifications:
    """Tests for the notification stack."""

    def test_alerts_expire(self):
        """Test alerts leave the stack after their lifetime."""
        clock = FakeClock()
        center = NotificationCenter(clock=clock)
        center.notify("one", NotificationType.ERROR)

        clock.now += ALERT_SECONDS - 1
        assert len(center.active) == 1
        clock.now += 1
        assert center.active == []

    def test_toasts_are_shorter(self):
        """Test success toasts use the shorter lifetime."""
        clock = FakeClock()
        center = NotificationCenter(clock=clock)
        center.success_toast("done")
        center.notify("alert", NotificationType.WARNING)

        clock.now += TOAST_SECONDS
        assert [n.message for n in center.active] == ["alert"]

    def test_stacking_and_dismiss(self):
        """Test notifications stack and dismiss individually."""
        center = NotificationCenter(clock=FakeClock())
        first = center.notify("first")
        second = center.notify("second", NotificationType.WARNING)

        assert [n.id for n in center.active] == [first.id, second.id]
        assert center.dismiss(first.id) is True
        assert center.dismiss(first.id) is False
        assert center.active == [second]

    def test_subscribers_are_called(self):
        """Test listeners receive each new notification."""
        center = NotificationCenter(clock=FakeClock())
        seen = []
        center.subscribe(seen.append)

        notification = center.notify("hello")

        assert seen == [notification]
