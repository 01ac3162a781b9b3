from textual.app import ComposeResult
from textual.widgets import Tree, Label
from textual.widgets.tree import TreeNode
from textual.containers import Container
from rich.text import Text

from models.track import TrackType
from services.event_bus import Event
from services.music_manager import MusicManager
from styles import COLOR_HIGHLIGHT, COLOR_LIKED, COLOR_SKIPPED

LIBRARY_EVENTS = (Event.ADD_TRACK, Event.REMOVE_TRACK)
MARKER_EVENTS = (Event.SET_TRACK, Event.SET_TRACK_TYPE, Event.RESET_TRACKS_BY_TYPE)


class LibraryView(Container):
    """Folder tree of the library with vim navigation."""

    DEFAULT_CSS = """
    LibraryView {
        background: #1a1a1a;
        border: solid #ff8c00;
        padding: 1;
    }

    LibraryView > Label {
        color: #ff8c00;
        text-style: bold;
        padding: 0 0 1 0;
    }
    """

    BINDINGS = [
        ("j", "move_down", "Move down"),
        ("k", "move_up", "Move up"),
    ]

    def __init__(self, manager: MusicManager, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.manager = manager
        self._leaves: dict[tuple[str, str], TreeNode] = {}

    def compose(self) -> ComposeResult:
        yield Label("🎵 Music Library")
        tree: Tree = Tree("Library", id="library-tree")
        tree.show_root = False
        yield tree

    def on_mount(self) -> None:
        self._populate_tree()
        for event in LIBRARY_EVENTS:
            self.manager.subscribe(event, self._on_library_changed)
        for event in MARKER_EVENTS:
            self.manager.subscribe(event, self._on_markers_changed)

    def on_unmount(self) -> None:
        for event in LIBRARY_EVENTS:
            self.manager.unsubscribe(event, self._on_library_changed)
        for event in MARKER_EVENTS:
            self.manager.unsubscribe(event, self._on_markers_changed)

    def focus(self, scroll_visible: bool = True):
        self.query_one("#library-tree", Tree).focus(scroll_visible)
        return self

    def _on_library_changed(self, _snapshot) -> None:
        self._populate_tree()

    def _on_markers_changed(self, _payload) -> None:
        self._update_markers()

    def _populate_tree(self) -> None:
        """Rebuild the folder/track nodes from the library."""
        tree = self.query_one("#library-tree", Tree)
        tree.clear()
        self._leaves = {}
        library = self.manager.library
        for folder in library.folders():
            folder_node = tree.root.add(Text(folder), data=(folder, None), expand=True)
            for track in library.tracks(folder):
                leaf = folder_node.add_leaf(self._track_label(folder, track), data=(folder, track))
                self._leaves[(folder, track)] = leaf

    def _update_markers(self) -> None:
        for (folder, track), leaf in self._leaves.items():
            leaf.set_label(self._track_label(folder, track))

    def _track_label(self, folder: str, track: str) -> Text:
        position = self.manager.position
        src = self.manager.library.source(folder, track)
        track_type = self.manager.library.type_of(src)

        label = Text()
        if position.folder == folder and position.track == track:
            label.append("♪ ", style=f"{COLOR_HIGHLIGHT} bold")
        else:
            label.append("  ")

        if track_type is TrackType.SKIPPED:
            label.append(track, style=f"{COLOR_SKIPPED} strike")
            label.append(" ✕", style=COLOR_SKIPPED)
        else:
            label.append(track)
            if track_type is TrackType.LIKED:
                label.append(" ♥", style=COLOR_LIKED)
        return label

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        """Jump to the selected track."""
        if not event.node.data:
            return
        folder, track = event.node.data
        if track is None:
            return
        self.manager.find_track(folder, track)
        event.stop()

    def action_move_down(self) -> None:
        """Move selection down in the tree (j key)."""
        self.query_one("#library-tree", Tree).action_cursor_down()

    def action_move_up(self) -> None:
        """Move selection up in the tree (k key)."""
        self.query_one("#library-tree", Tree).action_cursor_up()
