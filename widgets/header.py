from textual.widgets import Static
from textual.reactive import reactive
from textual.containers import Vertical
from textual.app import ComposeResult
from textual.css.query import NoMatches
from rich.text import Text
from styles import COLOR_ACCENT, COLOR_PRIMARY, COLOR_HIGHLIGHT, COLOR_MUTED, COLOR_INACTIVE

FOLDPLAY_ASCII = """
 ███████╗ ██████╗ ██╗     ██████╗ ██████╗ ██╗      █████╗ ██╗   ██╗
 ██╔════╝██╔═══██╗██║     ██╔══██╗██╔══██╗██║     ██╔══██╗╚██╗ ██╔╝
 █████╗  ██║   ██║██║     ██║  ██║██████╔╝██║     ███████║ ╚████╔╝
 ██╔══╝  ██║   ██║██║     ██║  ██║██╔═══╝ ██║     ██╔══██║  ╚██╔╝
 ██║     ╚██████╔╝███████╗██████╔╝██║     ███████╗██║  ██║   ██║
 ╚═╝      ╚═════╝ ╚══════╝╚═════╝ ╚═╝     ╚══════╝╚═╝  ╚═╝   ╚═╝
"""

VOLUME_BAR_WIDTH = 20
DEFAULT_VOLUME_LEVEL = 100


class Header(Vertical):
    volume_level: reactive[int] = reactive(DEFAULT_VOLUME_LEVEL)
    is_looping: reactive[bool] = reactive(False)
    is_shuffle: reactive[bool] = reactive(False)
    is_shuffle_all: reactive[bool] = reactive(False)
    is_liked_only: reactive[bool] = reactive(False)

    def compose(self) -> ComposeResult:
        yield Static(FOLDPLAY_ASCII, id="header-logo")
        yield Static("─" * 80, id="header-divider")
        yield Static(self._render_status_bar(), id="header-status")

    def _render_status_bar(self) -> Text:
        result = Text()
        filled_bars = int((self.volume_level / 100) * VOLUME_BAR_WIDTH)

        result.append("Volume ", style=COLOR_MUTED)
        result.append("│", style=COLOR_MUTED)

        for i in range(VOLUME_BAR_WIDTH):
            if i < filled_bars:
                if i < VOLUME_BAR_WIDTH * 0.5:
                    result.append("█", style=COLOR_ACCENT)
                elif i < VOLUME_BAR_WIDTH * 0.75:
                    result.append("█", style=COLOR_PRIMARY)
                else:
                    result.append("█", style=COLOR_HIGHLIGHT)
            else:
                result.append("─", style=COLOR_INACTIVE)

        result.append("│ ", style=COLOR_MUTED)
        result.append(f"{self.volume_level}%", style=f"{COLOR_PRIMARY} bold")

        for label, enabled in (
            ("Loop", self.is_looping),
            ("Shuffle", self.is_shuffle),
            ("All", self.is_shuffle_all),
            ("Liked", self.is_liked_only),
        ):
            result.append(f"  │  {label} ", style=COLOR_MUTED)
            if enabled:
                result.append("ON", style=f"{COLOR_PRIMARY} bold")
            else:
                result.append("OFF", style=COLOR_MUTED)

        return result

    def _refresh_status(self) -> None:
        try:
            status_widget = self.query_one("#header-status", Static)
        except NoMatches:
            return
        status_widget.update(self._render_status_bar())

    def watch_volume_level(self, new_value: int) -> None:
        self._refresh_status()

    def watch_is_looping(self, new_value: bool) -> None:
        self._refresh_status()

    def watch_is_shuffle(self, new_value: bool) -> None:
        self._refresh_status()

    def watch_is_shuffle_all(self, new_value: bool) -> None:
        self._refresh_status()

    def watch_is_liked_only(self, new_value: bool) -> None:
        self._refresh_status()
