"""Main scrollable job log display widget."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from rich.style import Style
from textual.binding import Binding, BindingType
from textual.geometry import Size
from textual.message import Message
from textual.reactive import reactive
from textual.scroll_view import ScrollView
from textual.strip import Strip

from jobtail.ansi import strip_ansi
from jobtail.document import LogDocument
from jobtail.grouper import GroupExpansion, GroupHeader, LineItem
from jobtail.render import INDENT, item_to_text, omitted_text
from jobtail.search import count_matches, find_line_matches
from jobtail.truncation import TruncationWindow

if TYPE_CHECKING:
    from rich.text import Text

    from jobtail.grouper import RenderItem
    from jobtail.truncation import WindowSlice


_GUTTER = 12


def _item_width(item: RenderItem) -> int:
    if isinstance(item, GroupHeader):
        return _GUTTER + len(INDENT) * item.group.level + len(item.group.name) + 8
    return _GUTTER + len(INDENT) * item.line.level + len(strip_ansi(item.line.content))


class JobLogView(ScrollView, can_focus=True):
    """Scrollable job log viewer using the Line API for virtual rendering.

    Each row is one render item (group header or line), except for a single
    placeholder row standing in for the omitted middle of a long log.
    """

    DEFAULT_CSS = """
    JobLogView {
        background: $surface;
        height: 1fr;
    }

    JobLogView > .joblogview--highlight {
        background: #264f78;
        color: #ffffff;
    }
    """

    COMPONENT_CLASSES: ClassVar[set[str]] = {
        "joblogview--highlight",
    }

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("up", "cursor_up", "Up", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
        Binding("home", "scroll_home", "Home", show=False),
        Binding("end", "scroll_end", "End", show=False),
        Binding("g", "scroll_home", "Top", show=False),
        Binding("G", "scroll_end", "Bottom", show=False),
        Binding("enter", "toggle_group", "Toggle group", show=False),
        Binding("space", "toggle_group", "Toggle group", show=False),
        Binding("t", "toggle_timestamps", "Timestamps"),
    ]

    cursor_line: reactive[int] = reactive(0)

    class Changed(Message):
        """Posted when the rendered rows or the search results change."""

    def __init__(self, window: TruncationWindow | None = None, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(**kwargs)
        self._window = window or TruncationWindow()
        self._document = LogDocument()
        self._expansion = GroupExpansion()
        self._items: list[RenderItem] = []
        self._slice: WindowSlice = self._window.slice(0)
        self._rows: list[int | None] = []
        self._max_width: int = 0
        self._show_timestamps: bool = True
        self._search: str | None = None
        self._matches: list[int] = []
        self._match_current: int = -1

    # --- State ---

    @property
    def document(self) -> LogDocument:
        return self._document

    @property
    def expansion(self) -> GroupExpansion:
        return self._expansion

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def omitted_count(self) -> int:
        return self._slice.omitted

    @property
    def search_term(self) -> str | None:
        return self._search

    @property
    def match_count(self) -> int:
        return count_matches(self._items, self._search)

    @property
    def match_line_count(self) -> int:
        return len(self._matches)

    @property
    def match_current(self) -> int:
        return self._match_current

    def set_document(self, document: LogDocument) -> None:
        """Show a new snapshot of the log, keeping expansion state and cursor.

        When the cursor sits on the last row it follows new output.
        """
        at_end = not self._rows or self.cursor_line >= len(self._rows) - 1
        self._document = document
        self._rebuild()
        if at_end and self._rows:
            self.cursor_line = len(self._rows) - 1

    def reset(self) -> None:
        """Forget expansion, truncation and search for a new session."""
        self._expansion = GroupExpansion()
        self._window.reset()
        self._search = None
        self._match_current = -1
        self._document = LogDocument()
        self.cursor_line = 0
        self._rebuild()

    def _rebuild(self) -> None:
        self._items = self._document.flatten(self._expansion)
        self._slice = self._window.slice(len(self._items))
        head_end, tail_start, total = self._slice.head_end, self._slice.tail_start, self._slice.total
        self._rows = list(range(head_end))
        if self._slice.truncated:
            self._rows.append(None)
            self._rows.extend(range(tail_start, total))
        self._matches = find_line_matches(self._items, self._search)
        if self._match_current >= len(self._matches):
            self._match_current = len(self._matches) - 1

        self._max_width = max((_item_width(self._items[i]) for i in self._rows if i is not None), default=0)
        self.virtual_size = Size(self._max_width + 2, len(self._rows))
        if self._rows:
            self.cursor_line = min(self.cursor_line, len(self._rows) - 1)
        else:
            self.cursor_line = 0
        self.refresh()
        self.post_message(self.Changed())

    def _row_for_item(self, index: int) -> int:
        if not self._slice.truncated or index < self._slice.head_end:
            return index
        return index - self._slice.tail_start + self._slice.head_end + 1

    def _row_text(self, row: int) -> Text:
        index = self._rows[row]
        if index is None:
            return omitted_text(self._slice.omitted)
        return item_to_text(self._items[index], self._search, show_timestamps=self._show_timestamps)

    def current_item(self) -> RenderItem | None:
        if not self._rows:
            return None
        index = self._rows[self.cursor_line]
        return None if index is None else self._items[index]

    # --- Rendering ---

    def render_line(self, y: int) -> Strip:
        scroll_x, scroll_y = self.scroll_offset
        row = scroll_y + y
        content_width = self.scrollable_content_region.width

        if content_width <= 0:
            return Strip.blank(self.size.width, self.rich_style)
        if row < 0 or row >= len(self._rows):
            return Strip.blank(content_width, self.rich_style)

        strip = Strip(self._row_text(row).render(self.app.console, end=""))
        strip = strip.crop(scroll_x, scroll_x + content_width)
        if row == self.cursor_line:
            highlight_style = self.get_component_rich_style("joblogview--highlight")
            strip = strip.apply_style(Style(bgcolor=highlight_style.bgcolor))
            strip = strip.extend_cell_length(content_width, Style(bgcolor=highlight_style.bgcolor))
        else:
            strip = strip.extend_cell_length(content_width)
            strip = strip.apply_style(self.rich_style)
        return strip

    def watch_cursor_line(self, _old_value: int, _new_value: int) -> None:
        self._scroll_cursor_into_view()
        self.refresh()

    def _scroll_cursor_into_view(self) -> None:
        region_height = self.scrollable_content_region.height
        if not self._rows or region_height <= 0:
            return
        scroll_y = self.scroll_offset.y
        if self.cursor_line < scroll_y:
            self.scroll_to(y=self.cursor_line, animate=False)
        elif self.cursor_line >= scroll_y + region_height:
            self.scroll_to(y=self.cursor_line - region_height + 1, animate=False)

    # --- Groups and truncation ---

    def action_toggle_group(self) -> None:
        """Toggle the group under the cursor, or reveal omitted lines on the placeholder."""
        if not self._rows:
            return
        index = self._rows[self.cursor_line]
        if index is None:
            self.show_all()
            return
        item = self._items[index]
        group = self._document.groups[item.group_index]
        if group.is_standalone:
            return
        self._expansion.toggle(item.group_index, group)
        self._rebuild()
        self.cursor_line = self._header_row(item.group_index)

    def _header_row(self, group_index: int) -> int:
        for index, item in enumerate(self._items):
            if isinstance(item, GroupHeader) and item.group_index == group_index:
                return self._row_for_item(index)
        return self.cursor_line

    def expand_all(self) -> None:
        self._expansion.expand_all(self._document.groups)
        self._rebuild()

    def collapse_all(self) -> None:
        current = self.current_item()
        self._expansion.collapse_all()
        self._rebuild()
        if isinstance(current, LineItem):
            self.cursor_line = self._header_row(current.group_index)

    def show_all(self) -> None:
        """Render every line, dropping the omitted placeholder."""
        if not self._slice.truncated:
            return
        row_item = self._rows[self.cursor_line] if self._rows else None
        self._window.show_everything()
        self._rebuild()
        if row_item is not None:
            self.cursor_line = row_item
        else:
            self.cursor_line = min(self.cursor_line, len(self._rows) - 1)

    def focus_source_line(self, source_index: int) -> bool:
        """Move the cursor to a raw log line, expanding and un-truncating as needed."""
        index = self._document.reveal(source_index, self._expansion)
        if index is None:
            return False
        self._window.focus(index, len(self._document.flatten(self._expansion)))
        self._rebuild()
        self.cursor_line = self._row_for_item(index)
        return True

    # --- Search ---

    def set_search(self, term: str | None) -> None:
        """Highlight a term and move to its first match at or after the cursor."""
        self._search = term or None
        self._match_current = -1
        self._rebuild()
        if not self._matches:
            return
        cursor_item = self._rows[self.cursor_line] if self._rows else None
        start = cursor_item if cursor_item is not None else self._slice.head_end
        self._match_current = next((i for i, m in enumerate(self._matches) if m >= start), 0)
        self._goto_match()

    def clear_search(self) -> None:
        self.set_search(None)

    def _goto_match(self) -> None:
        index = self._matches[self._match_current]
        if self._window.focus(index, len(self._items)):
            self._rebuild()
        self.cursor_line = self._row_for_item(index)
        self.post_message(self.Changed())

    def action_next_match(self) -> None:
        if not self._matches:
            return
        self._match_current = (self._match_current + 1) % len(self._matches)
        self._goto_match()

    def action_prev_match(self) -> None:
        if not self._matches:
            return
        self._match_current = (self._match_current - 1) % len(self._matches)
        self._goto_match()

    # --- Navigation ---

    def action_cursor_up(self) -> None:
        if self.cursor_line > 0:
            self.cursor_line -= 1

    def action_cursor_down(self) -> None:
        if self.cursor_line < len(self._rows) - 1:
            self.cursor_line += 1

    def action_page_up(self) -> None:
        page_size = max(1, self.scrollable_content_region.height - 1)
        self.cursor_line = max(0, self.cursor_line - page_size)

    def action_page_down(self) -> None:
        page_size = max(1, self.scrollable_content_region.height - 1)
        self.cursor_line = max(0, min(self.cursor_line + page_size, len(self._rows) - 1))

    def action_scroll_home(self) -> None:
        self.cursor_line = 0

    def action_scroll_end(self) -> None:
        if self._rows:
            self.cursor_line = len(self._rows) - 1

    def action_toggle_timestamps(self) -> None:
        self._show_timestamps = not self._show_timestamps
        self._rebuild()
