"""Textual application for jobtail."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.widgets import Footer
from textual.worker import get_current_worker

from jobtail.document import LogDocument
from jobtail.models import AppConfig, StreamPhase
from jobtail.truncation import TruncationWindow
from jobtail.widgets.annotations_dialog import AnnotationsDialog
from jobtail.widgets.help_screen import HelpScreen
from jobtail.widgets.log_view import JobLogView
from jobtail.widgets.search_dialog import SearchDialog
from jobtail.widgets.status_bar import StatusBar

if TYPE_CHECKING:
    from jobtail.stream import StreamController

_STREAM_GROUP = "stream"


class JobLogApp(App[None]):
    """Job log viewer TUI application."""

    ENABLE_COMMAND_PALETTE = False

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit"),
        Binding("question_mark", "show_help", "Help"),
        Binding("h", "show_help", "Help", show=False),
        Binding("slash", "search", "Search"),
        Binding("n", "next_match", "Next", show=False),
        Binding("N", "prev_match", "Prev", show=False),
        Binding("a", "annotations", "Annotations"),
        Binding("p", "toggle_streaming", "Stream"),
        Binding("r", "reload", "Reload", show=False),
        Binding("o", "show_all", "Show all"),
        Binding("e", "expand_all", "Expand"),
        Binding("E", "collapse_all", "Collapse"),
    ]

    def __init__(
        self,
        controller: StreamController,
        config: AppConfig | None = None,
        *,
        follow: bool = True,
    ) -> None:
        super().__init__()
        self._controller = controller
        self._config = config or AppConfig()
        self._follow = follow
        self._last_text: str | None = None
        self._last_notice: str | None = None

    def compose(self) -> ComposeResult:
        window = TruncationWindow(self._config.render_limit, self._config.head_lines, self._config.tail_lines)
        yield JobLogView(window=window, id="log-view")
        yield StatusBar(source=self._controller.source.description, id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.theme = self._config.theme
        if self._follow:
            self._start_streaming()
        else:
            self.run_worker(self._load_once(), group=_STREAM_GROUP, exclusive=True)
        self._update_status_bar()

    async def on_unmount(self) -> None:
        await self._controller.aclose()

    # --- Streaming ---

    def _start_streaming(self) -> None:
        self.run_worker(self._stream_worker(), group=_STREAM_GROUP, exclusive=True)

    async def _stream_worker(self) -> None:
        """Consume the controller's poll loop and refresh the view after each tick."""
        worker = get_current_worker()
        async for _state in self._controller.follow():
            if worker.is_cancelled:
                break
            self._on_tick()
        self._update_status_bar()

    async def _load_once(self) -> None:
        await self._controller.poll()
        self._on_tick()

    def _on_tick(self) -> None:
        text = self._controller.state.content
        if text != self._last_text:
            self._last_text = text
            self.query_one("#log-view", JobLogView).set_document(LogDocument.from_text(text))
        self._report_problems()
        self._update_status_bar()

    def _report_problems(self) -> None:
        """Notify once per distinct fetch error or not-found message."""
        controller = self._controller
        if controller.phase == StreamPhase.ERROR:
            notice = str(controller.last_error) if controller.last_error is not None else controller.message
            if notice and notice != self._last_notice:
                self.notify(notice, severity="warning")
            self._last_notice = notice
        elif controller.phase == StreamPhase.NOT_FOUND:
            if controller.message and controller.message != self._last_notice:
                self.notify(controller.message, severity="information")
            self._last_notice = controller.message
        else:
            self._last_notice = None

    def action_toggle_streaming(self) -> None:
        controller = self._controller
        if controller.streaming:
            controller.stop()
            self.workers.cancel_group(self, _STREAM_GROUP)
            self.notify("Streaming stopped")
        elif controller.is_completed:
            self.notify("Job log is complete")
        else:
            self._start_streaming()
            self.notify("Streaming started")
        self._update_status_bar()

    def action_reload(self) -> None:
        """Drop everything and fetch the log again from offset 0."""
        streaming = self._controller.streaming
        self.workers.cancel_group(self, _STREAM_GROUP)
        self._controller.stop()
        self._controller.reset()
        self._last_text = None
        self.query_one("#log-view", JobLogView).reset()
        if streaming:
            self._start_streaming()
        else:
            self.run_worker(self._load_once(), group=_STREAM_GROUP, exclusive=True)

    # --- View actions ---

    def action_search(self) -> None:
        log_view = self.query_one("#log-view", JobLogView)
        self.push_screen(SearchDialog(log_view.search_term), callback=self._on_search_result)

    def _on_search_result(self, term: str | None) -> None:
        if term is None:
            return
        log_view = self.query_one("#log-view", JobLogView)
        log_view.set_search(term)
        if term and not log_view.match_line_count:
            self.notify(f"No matches for '{term}'", severity="warning")

    def action_next_match(self) -> None:
        self.query_one("#log-view", JobLogView).action_next_match()

    def action_prev_match(self) -> None:
        self.query_one("#log-view", JobLogView).action_prev_match()

    def action_annotations(self) -> None:
        annotations = self.query_one("#log-view", JobLogView).document.annotations
        if not annotations:
            self.notify("No annotations in this log", severity="warning")
            return
        self.push_screen(AnnotationsDialog(annotations), callback=self._on_annotation_selected)

    def _on_annotation_selected(self, line: int | None) -> None:
        if line is None:
            return
        if not self.query_one("#log-view", JobLogView).focus_source_line(line):
            self.notify(f"Line {line + 1} is not in the log", severity="warning")

    def action_show_all(self) -> None:
        self.query_one("#log-view", JobLogView).show_all()

    def action_expand_all(self) -> None:
        self.query_one("#log-view", JobLogView).expand_all()

    def action_collapse_all(self) -> None:
        self.query_one("#log-view", JobLogView).collapse_all()

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    # --- Status ---

    def on_job_log_view_changed(self, _event: JobLogView.Changed) -> None:
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        log_view = self.query_one("#log-view", JobLogView)
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.update_stream(self._controller)
        status_bar.update_counts(
            len(log_view.document.lines),
            omitted=log_view.omitted_count,
            annotations=len(log_view.document.annotations),
        )
        if log_view.search_term:
            status_bar.update_search(log_view.match_count, log_view.match_current, log_view.match_line_count)
        else:
            status_bar.update_search(None)

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:  # noqa: ARG002
        """Hide the stream binding once the log is complete."""
        if action == "toggle_streaming":
            return None if self._controller.is_completed else True
        return True
