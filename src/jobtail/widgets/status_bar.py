"""Bottom status bar."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text
from textual.widget import Widget

from jobtail.models import StreamPhase

if TYPE_CHECKING:
    from jobtail.stream import StreamController

_PHASE_BADGES: dict[StreamPhase, tuple[str, str]] = {
    StreamPhase.IDLE: (" PAUSED ", "bold reverse"),
    StreamPhase.FETCHING: (" LIVE ", "bold green reverse"),
    StreamPhase.GROWING: (" LIVE ", "bold green reverse"),
    StreamPhase.STALLED: (" LIVE ", "bold yellow reverse"),
    StreamPhase.COMPLETED: (" DONE ", "bold reverse"),
    StreamPhase.ERROR: (" ERROR ", "bold red reverse"),
    StreamPhase.NOT_FOUND: (" WAITING ", "bold yellow reverse"),
}


class StatusBar(Widget):
    """Bottom status bar showing stream state, counts and the job source."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        dock: bottom;
        background: #264f78;
        color: #ffffff;
        padding: 0 1;
    }
    """

    def __init__(self, source: str = "", id: str | None = None) -> None:  # noqa: A002
        super().__init__(id=id)
        self._source = source
        self._phase = StreamPhase.IDLE
        self._streaming = False
        self._job_status: str | None = None
        self._job_conclusion: str | None = None
        self._cycles: int = 0
        self._notice: str | None = None
        self._lines: int = 0
        self._omitted: int = 0
        self._annotations: int = 0
        self._matches: int | None = None
        self._match_current: int = -1
        self._match_lines: int = 0

    def update_stream(self, controller: StreamController) -> None:
        """Copy the display-relevant parts of the controller's state."""
        self._phase = controller.phase
        self._streaming = controller.streaming
        self._job_status = controller.job_status
        self._job_conclusion = controller.job_conclusion
        self._cycles = controller.state.cycles_without_growth
        self._notice = str(controller.last_error) if controller.last_error is not None else controller.message
        self.refresh()

    def update_counts(self, lines: int, omitted: int = 0, annotations: int = 0) -> None:
        self._lines = lines
        self._omitted = omitted
        self._annotations = annotations
        self.refresh()

    def update_search(self, matches: int | None, current: int = -1, match_lines: int = 0) -> None:
        """Set the search match count; None hides it."""
        self._matches = matches
        self._match_current = current
        self._match_lines = match_lines
        self.refresh()

    def render(self) -> Text:
        text = Text()

        phase = self._phase
        if phase in {StreamPhase.FETCHING, StreamPhase.GROWING, StreamPhase.STALLED} and not self._streaming:
            phase = StreamPhase.IDLE
        label, style = _PHASE_BADGES[phase]
        text.append(label, style=style)
        text.append(" ")

        if self._job_status:
            status = self._job_status
            if self._job_conclusion:
                status += f"/{self._job_conclusion}"
            text.append(f"{status}  ")

        text.append(f"{self._lines:,} lines")
        if self._omitted:
            text.append(f" ({self._omitted:,} omitted)", style="dim")
        if self._annotations:
            text.append(f"  {self._annotations} annotations")
        if self._matches is not None:
            position = f"{self._match_current + 1}/{self._match_lines} lines, " if self._match_current >= 0 else ""
            text.append(f"  [{position}{self._matches} matches]", style="bold")
        if self._cycles:
            text.append(f"  idle {self._cycles}", style="dim")
        if self._notice:
            text.append(f"  {self._notice}", style="italic")

        right_part = self._source
        if right_part:
            used = len(text.plain)
            padding = max(1, self.size.width - used - len(right_part))
            text.append(" " * padding)
            text.append(right_part)

        return text
