from textual.app import App, ComposeResult
from textual.widgets import Footer
from textual.containers import Horizontal, Vertical
from textual.binding import Binding
import logging

from config import PlayerConfig
from widgets import Header, HelpScreen
from views import LibraryView, NowPlayingView
from services.audio_player import AudioPlayer
from services.event_bus import Event
from services.music_library import InvalidLibraryState, LibraryStore
from services.music_manager import MusicManager
from services.player_backend import PlayerBackend


class MainViewContainer(Vertical):
    """Container for the main view."""

    def __init__(self, manager, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.manager = manager

    def compose(self) -> ComposeResult:
        """Compose the main view layout."""
        with Horizontal(id="top-container"):
            yield LibraryView(self.manager, id="library")
            yield NowPlayingView(self.manager, id="now_playing")


BACKEND_POLL_INTERVAL = 0.5
HEADER_EVENTS = (
    Event.CHANGE_VOLUME,
    Event.TOGGLE_LOOP,
    Event.TOGGLE_SHUFFLE,
    Event.TOGGLE_SHUFFLE_ALL,
    Event.TOGGLE_LIKED_TRACKS,
)

logger = logging.getLogger(__name__)


def configure_logging(config: PlayerConfig) -> None:
    config.log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(config.log_file)
        ]
    )


def load_library(config: PlayerConfig) -> tuple[dict, dict]:
    """Read the library file if configured, otherwise scan the music directory.

    Raises:
        InvalidLibraryState: If no playable track was found.
    """
    if config.library_file is not None:
        logger.info(f"Loading library from {config.library_file}")
        library, track_types = LibraryStore.load_library_file(config.library_file)
    else:
        logger.info(f"Scanning music directory {config.music_dir}")
        library, track_types = LibraryStore.scan_directory(config.music_dir), {}

    if not library:
        raise InvalidLibraryState(
            f"No music files found in {config.music_dir}\n\n"
            "Add some audio files or set FOLDPLAY_LIBRARY_FILE."
        )
    return library, track_types


def create_backends() -> list[PlayerBackend]:
    """Players wired into the app.

    SC and YT sources have no widget host in a terminal and stay silent with a
    notice.
    """
    return [AudioPlayer()]


class FoldplayApp(App):
    """A terminal player for folders of tracks, built with Textual."""

    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("space", "play_pause", "Play/Pause"),
        Binding("n", "next_track", "Next", priority=True),
        Binding("p", "previous_track", "Prev", priority=True),
        Binding("N", "next_folder", "Next folder", show=False, priority=True),
        Binding("P", "previous_folder", "Prev folder", show=False, priority=True),
        Binding("right_square_bracket", "seek_forward", "Seek+", show=False, priority=True),
        Binding("left_square_bracket", "seek_backward", "Seek-", show=False, priority=True),
        Binding("+", "volume_up", "Vol+", priority=True),
        Binding("=", "volume_up", "Vol+", show=False, priority=True),
        Binding("-", "volume_down", "Vol-", priority=True),
        Binding("l", "toggle_loop", "Loop", priority=True),
        Binding("s", "toggle_shuffle", "Shuffle", priority=True),
        Binding("a", "toggle_shuffle_all", "All", priority=True),
        Binding("f", "toggle_liked", "Liked", priority=True),
        Binding("L", "like_track", "Like", show=False, priority=True),
        Binding("x", "skip_track", "Skip", priority=True),
        Binding("r", "reshuffle", "Reshuffle", show=False, priority=True),
        Binding("h", "show_help", "Help", priority=True),
        Binding("?", "show_help", "Help", show=False, priority=True),
    ]

    def __init__(self, config: PlayerConfig, manager: MusicManager, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = config
        self.manager = manager

    def compose(self) -> ComposeResult:
        """Compose the main application layout."""
        yield Header()
        yield MainViewContainer(self.manager, id="main-view")
        yield Footer()

    def on_mount(self) -> None:
        """Initialize the application."""
        self.query_one("#library", LibraryView).focus()

        for event in HEADER_EVENTS:
            self.manager.subscribe(event, self._on_mode_changed)
        self.manager.subscribe(Event.NOTICE, self._on_notice)
        self._on_mode_changed(None)

        self.set_interval(BACKEND_POLL_INTERVAL, self._poll_backends)

    def _on_mode_changed(self, _payload) -> None:
        header = self.query_one(Header)
        header.volume_level = int(round(self.manager.current_volume * 100))
        header.is_looping = self.manager.is_looping
        header.is_shuffle = self.manager.is_shuffling
        header.is_shuffle_all = self.manager.is_shuffling_all
        header.is_liked_only = self.manager.is_playing_liked

    def _on_notice(self, message: str) -> None:
        self.notify(message, severity="warning", timeout=5)

    def _poll_backends(self) -> None:
        """Let the active backend report time and advance on track end."""
        try:
            self.manager.poll()
        except Exception as e:
            logger.error(f"Error during track auto-advance: {e}")
            self.notify("❌ Error advancing to next track", severity="error", timeout=3)

    def _run_safely(self, action, failure: str) -> None:
        try:
            action()
        except Exception as e:
            logger.error(f"{failure}: {e}")
            self.notify(f"❌ {failure}", severity="error", timeout=3)

    def action_quit(self) -> None:
        """Handle quit action for clean shutdown."""
        self.manager.shutdown()
        self.exit()

    def action_play_pause(self) -> None:
        self._run_safely(self.manager.toggle_play, "Cannot toggle playback")

    def action_next_track(self) -> None:
        self._run_safely(self.manager.next_track, "Cannot play next track")

    def action_previous_track(self) -> None:
        self._run_safely(self.manager.previous_track, "Cannot play previous track")

    def action_next_folder(self) -> None:
        self._run_safely(self.manager.next_folder, "Cannot play next folder")

    def action_previous_folder(self) -> None:
        self._run_safely(self.manager.previous_folder, "Cannot play previous folder")

    def action_seek_forward(self) -> None:
        self._run_safely(lambda: self.manager.fast_forward(self.config.seek_step), "Cannot seek")

    def action_seek_backward(self) -> None:
        self._run_safely(lambda: self.manager.fast_forward(-self.config.seek_step), "Cannot seek")

    def action_volume_up(self) -> None:
        volume = self.manager.change_volume(self.config.volume_step)
        self.notify(f"🔊 Volume ▲ {int(round(volume * 100))}%", timeout=1.5)

    def action_volume_down(self) -> None:
        volume = self.manager.change_volume(-self.config.volume_step)
        mute_icon = "🔇" if volume == 0 else "🔉"
        self.notify(f"{mute_icon} Volume ▼ {int(round(volume * 100))}%", timeout=1.5)

    def action_toggle_loop(self) -> None:
        self.manager.toggle_loop()

    def action_toggle_shuffle(self) -> None:
        self._run_safely(self.manager.toggle_shuffle, "Cannot toggle shuffle")

    def action_toggle_shuffle_all(self) -> None:
        self._run_safely(self.manager.toggle_shuffle_all, "Cannot toggle shuffle all")

    def action_toggle_liked(self) -> None:
        self._run_safely(self.manager.toggle_liked_tracks, "Cannot toggle liked tracks")

    def action_like_track(self) -> None:
        self.manager.set_track_type("liked")

    def action_skip_track(self) -> None:
        self._run_safely(lambda: self.manager.set_track_type("skipped"), "Cannot skip track")

    def action_reshuffle(self) -> None:
        self.manager.reshuffle()
        self.notify("🔀 Reshuffled", timeout=1.5)

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())


def main():
    """Entry point for the FOLDPLAY application.

    Handles initialization errors and provides user-friendly error messages.
    """
    config = PlayerConfig.from_env()
    configure_logging(config)

    try:
        logger.info("=" * 60)
        logger.info("FOLDPLAY starting up")
        logger.info("=" * 60)

        library, track_types = load_library(config)
        manager = MusicManager(
            library,
            track_types,
            backends=create_backends(),
            volume=config.volume,
        )

        app = FoldplayApp(config, manager)
        app.run()

        logger.info("FOLDPLAY shut down cleanly")

    except (InvalidLibraryState, RuntimeError, OSError, ValueError) as e:
        logger.critical(f"Fatal error during startup: {e}")
        print("\n❌ FOLDPLAY cannot start\n")
        print(f"{e}\n")
        print(f"Check {config.log_file} for more details.\n")
        exit(1)
    except KeyboardInterrupt:
        logger.info("FOLDPLAY interrupted by user")
        print("\n\nGoodbye! 👋\n")
        exit(0)
    except Exception as e:
        logger.critical(f"Unexpected fatal error: {type(e).__name__}: {e}", exc_info=True)
        print("\n❌ FOLDPLAY encountered an unexpected error\n")
        print(f"{type(e).__name__}: {e}\n")
        print(f"Check {config.log_file} for more details.\n")
        exit(1)


if __name__ == "__main__":
    main()
