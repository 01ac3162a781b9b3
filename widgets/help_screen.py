from __future__ import annotations

from textual.screen import ModalScreen
from textual.widgets import Static, Button
from textual.containers import Container, VerticalScroll
from textual.app import ComposeResult
from textual.binding import Binding

from styles import COLOR_ACCENT, COLOR_PRIMARY

HELP_SECTIONS = (
    ("LIBRARY", (
        ("j/k", "Move down/up in the folder tree"),
        ("Enter", "Play selected track (leaves shuffle and liked modes)"),
    )),
    ("PLAYBACK", (
        ("Space", "Play/Pause current track"),
        ("n / p", "Next / previous track"),
        ("N / P", "Next / previous folder"),
        ("] / [", "Seek forward / backward"),
        ("+ / -", "Volume up / down"),
    )),
    ("MODES", (
        ("l", "Loop current track"),
        ("s", "Shuffle current folder"),
        ("a", "Shuffle all folders"),
        ("f", "Play liked tracks only"),
        ("r", "Reshuffle"),
    )),
    ("TRACKS", (
        ("L", "Like / unlike current track"),
        ("x", "Skip / unskip current track"),
        ("h/?", "Show this help"),
        ("q", "Quit"),
    )),
)

MARKERS = (
    ("♪", "currently playing track"),
    ("♥", "liked track"),
    ("✕", "skipped track, only played when nothing else is playable"),
)


def render_help() -> str:
    """Build the help text as Rich markup."""
    lines = [f"[bold {COLOR_PRIMARY}]🎵 FOLDPLAY - Folder Music Player[/bold {COLOR_PRIMARY}]"]
    for title, keys in HELP_SECTIONS:
        lines.append("")
        lines.append(f"[bold]{title}[/bold]")
        lines.extend(f"  {key:<10}  {description}" for key, description in keys)
    lines.append("")
    lines.append("[bold]MARKERS[/bold]")
    lines.extend(f"  {marker}  {description}" for marker, description in MARKERS)
    return "\n".join(lines)


class HelpScreen(ModalScreen[None]):
    """Modal screen listing the key bindings."""

    DEFAULT_CSS = f"""
    HelpScreen {{
        align: center middle;
    }}

    #help-container {{
        width: 72;
        height: 85%;
        background: #1a1a1a;
        border: thick {COLOR_ACCENT};
        padding: 1 2;
    }}

    #help-scroll {{
        height: 1fr;
        margin-bottom: 1;
    }}

    #help-close-button {{
        width: 100%;
        color: {COLOR_PRIMARY};
        border: solid {COLOR_PRIMARY};
        text-style: bold;
    }}
    """

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("j", "scroll_help(1)", "Down", show=False),
        Binding("k", "scroll_help(-1)", "Up", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Container(id="help-container"):
            with VerticalScroll(id="help-scroll"):
                yield Static(render_help(), id="help-content")
            yield Button("Close (Esc)", id="help-close-button", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#help-close-button", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close-button":
            self.dismiss()

    def action_scroll_help(self, direction: int) -> None:
        scroll = self.query_one("#help-scroll", VerticalScroll)
        if direction > 0:
            scroll.scroll_down()
        else:
            scroll.scroll_up()
