"""Modal dialog for entering a search term."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.binding import BindingType


class SearchDialog(ModalScreen[str | None]):
    """Asks for a literal, case-insensitive search term.

    Dismisses with the term, an empty string to clear the search, or None on cancel.
    """

    DEFAULT_CSS = """
    SearchDialog {
        align: center middle;
    }

    SearchDialog > Vertical {
        width: 70;
        height: auto;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }

    SearchDialog > Vertical > .title {
        margin-bottom: 1;
        text-style: bold;
    }

    SearchDialog > Vertical > Input {
        width: 100%;
    }

    SearchDialog > Vertical > .hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, last_term: str | None = None) -> None:
        super().__init__()
        self._last_term = last_term

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label("Search (/)", classes="title")
            yield Input(value=self._last_term or "", placeholder="search term...", id="search-input")
            yield Label("Enter to search, empty to clear, Escape to cancel", classes="hint")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)
