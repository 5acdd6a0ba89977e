"""Help screen showing all keyboard shortcuts."""

from __future__ import annotations

from typing import ClassVar

from textual.app import ComposeResult
from textual.binding import BindingType
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

HELP_TEXT = """\
[bold]Navigation[/bold]
  Up/Down       Move between rows
  PgUp/PgDn     Page up/down
  Home/End      Jump to first/last row
  g / G         Jump to first/last row

[bold]Groups[/bold]
  Enter/Space   Toggle the group under the cursor
  e             Expand all groups
  E             Collapse all groups

[bold]Long logs[/bold]
  o             Show all omitted lines
  Enter         On the omitted row, show everything

[bold]Search[/bold]
  /             Search (case-insensitive, empty clears)
  n / N         Next/previous matching line

[bold]Annotations[/bold]
  a             List annotations, Enter jumps to the line
  l             (in the list) Cycle the level filter

[bold]Streaming[/bold]
  p             Start/stop polling for new output
  r             Reload the log from the start
  t             Toggle timestamps

[bold]General[/bold]
  h, ?          Show this help
  q             Quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal help screen with keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > VerticalScroll {
        width: 70;
        height: 80%;
        max-height: 36;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        ("escape", "dismiss_help", "Close"),
        ("h", "dismiss_help", "Close"),
        ("question_mark", "dismiss_help", "Close"),
    ]

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(HELP_TEXT, markup=True)

    def action_dismiss_help(self) -> None:
        self.dismiss(None)
