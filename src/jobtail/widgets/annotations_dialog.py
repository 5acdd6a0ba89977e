"""Modal dialog listing the annotations found in the log."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from rich.text import Text
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList
from textual.widgets.option_list import Option

from jobtail.annotations import AnnotationFilter, filter_annotations, level_counts
from jobtail.models import AnnotationLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from textual.app import ComposeResult
    from textual.binding import BindingType

    from jobtail.models import Annotation

_FILTER_CYCLE = list(AnnotationFilter)

_LEVEL_BADGES: dict[AnnotationLevel, tuple[str, str]] = {
    AnnotationLevel.FAILURE: ("E", "bold red"),
    AnnotationLevel.WARNING: ("W", "yellow"),
    AnnotationLevel.NOTICE: ("N", "blue"),
}


class AnnotationsDialog(ModalScreen[int | None]):
    """Annotation list with a level filter. Selecting one returns its log line index."""

    DEFAULT_CSS = """
    AnnotationsDialog {
        align: center middle;
    }

    AnnotationsDialog > Vertical {
        width: 90%;
        height: 80%;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }

    AnnotationsDialog > Vertical > .title {
        margin-bottom: 1;
        text-style: bold;
    }

    AnnotationsDialog > Vertical > OptionList {
        height: 1fr;
    }

    AnnotationsDialog > Vertical > .hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Close"),
        Binding("l", "cycle_level", "Level"),
    ]

    def __init__(self, annotations: Sequence[Annotation]) -> None:
        super().__init__()
        self._annotations = list(annotations)
        self._counts = level_counts(self._annotations)
        self._level = AnnotationFilter.ALL
        self._shown: list[Annotation] = []

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("", id="annotations-title", classes="title")
            yield OptionList(id="annotations-list")
            yield Label("Enter: jump to line  l: cycle level  Esc: close", classes="hint")

    def on_mount(self) -> None:
        self._rebuild_list()

    def _rebuild_list(self) -> None:
        self._shown = filter_annotations(self._annotations, self._level)
        ol = self.query_one("#annotations-list", OptionList)
        ol.clear_options()
        for annotation in self._shown:
            ol.add_option(Option(self._format(annotation)))

        counts = "  ".join(f"{level.value}: {self._counts.get(level, 0)}" for level in AnnotationLevel)
        self.query_one("#annotations-title", Label).update(
            f"{len(self._shown)} annotations  |  level: {self._level.value}  |  {counts}"
        )

    @staticmethod
    def _format(annotation: Annotation) -> Text:
        badge, style = _LEVEL_BADGES[annotation.annotation_level]
        text = Text()
        text.append(f" {badge} ", style=style)
        text.append(f"{annotation.line + 1:>6}  ", style="dim")
        if annotation.path:
            location = annotation.path
            if annotation.start_line is not None:
                location += f":{annotation.start_line}"
            text.append(f"{location}  ", style="green")
        if annotation.title and annotation.title != annotation.message:
            text.append(f"{annotation.title}: ", style="bold")
        text.append(annotation.message)
        return text

    def action_cycle_level(self) -> None:
        self._level = _FILTER_CYCLE[(_FILTER_CYCLE.index(self._level) + 1) % len(_FILTER_CYCLE)]
        self._rebuild_list()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        idx = event.option_index
        if 0 <= idx < len(self._shown):
            self.dismiss(self._shown[idx].line)

    def action_cancel(self) -> None:
        self.dismiss(None)
