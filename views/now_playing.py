from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Static
from rich.text import Text

from models.track import format_time
from services.event_bus import Event
from services.music_manager import MusicManager
from styles import COLOR_ACCENT, COLOR_PRIMARY, COLOR_HIGHLIGHT, COLOR_INACTIVE, COLOR_MUTED

PROGRESS_UPDATE_INTERVAL = 1.0
PROGRESS_BAR_WIDTH = 40
WATCHED_EVENTS = (Event.SET_TRACK, Event.PLAY, Event.PAUSE, Event.SET_DURATION, Event.UPDATE_TIME)


class NowPlayingView(Container):
    """Widget displaying the current position and transport state."""

    def __init__(self, manager: MusicManager, **kwargs):
        """Initialize NowPlayingView with the session it displays."""
        super().__init__(**kwargs)
        self.manager = manager
        self._update_timer = None
        self._title_widget: Static | None = None
        self._folder_widget: Static | None = None
        self._source_widget: Static | None = None
        self._time_widget: Static | None = None
        self._progress_widget: Static | None = None
        self._state_widget: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("♪", classes="music-icon")
            yield Static("No track selected", id="np-title", classes="track-title")
            yield Static("Folder: -", id="np-folder", classes="track-metadata")
            yield Static("Source: -", id="np-source", classes="track-metadata")
            yield Static("0:00 / 0:00", id="np-time", classes="time-display")
            yield Static(self._render_progress(0.0, 0.0), id="np-progress")
            yield Static("State: Paused", id="np-state", classes="state-display")

    def on_mount(self) -> None:
        """Start the progress timer and follow session events."""
        self._title_widget = self.query_one("#np-title", Static)
        self._folder_widget = self.query_one("#np-folder", Static)
        self._source_widget = self.query_one("#np-source", Static)
        self._time_widget = self.query_one("#np-time", Static)
        self._progress_widget = self.query_one("#np-progress", Static)
        self._state_widget = self.query_one("#np-state", Static)

        for event in WATCHED_EVENTS:
            self.manager.subscribe(event, self._on_session_event)
        self._update_timer = self.set_interval(PROGRESS_UPDATE_INTERVAL, self._update_progress)
        self._update_progress()

    def on_unmount(self) -> None:
        for event in WATCHED_EVENTS:
            self.manager.unsubscribe(event, self._on_session_event)

    def _on_session_event(self, _payload) -> None:
        self._update_progress()

    def _update_progress(self) -> None:
        """Update all display widgets with current playback information."""
        if self._title_widget is None:
            return
        position = self.manager.position
        current_time = self.manager.current_time
        duration = self.manager.current_duration

        self._title_widget.update(Text(position.track))
        self._folder_widget.update(Text(f"Folder: {position.folder}"))
        self._source_widget.update(Text(f"Source: {position.src} [{position.filetype.value}]"))
        total = format_time(duration) if duration else "--:--"
        self._time_widget.update(f"{format_time(current_time)} / {total}")
        self._progress_widget.update(self._render_progress(current_time, duration))
        self._state_widget.update(f"State: {'Playing' if self.manager.is_playing else 'Paused'}")

    def _render_progress(self, current_time: float, duration: float) -> Text:
        """Render a horizontal progress bar."""
        result = Text()
        filled = int(min(1.0, current_time / duration) * PROGRESS_BAR_WIDTH) if duration else 0

        result.append("│", style=COLOR_MUTED)
        for i in range(PROGRESS_BAR_WIDTH):
            if i < filled:
                if i < PROGRESS_BAR_WIDTH * 0.7:
                    result.append("█", style=COLOR_ACCENT)
                elif i < PROGRESS_BAR_WIDTH * 0.85:
                    result.append("█", style=COLOR_PRIMARY)
                else:
                    result.append("█", style=COLOR_HIGHLIGHT)
            else:
                result.append("─", style=COLOR_INACTIVE)
        result.append("│", style=COLOR_MUTED)
        return result
