from .event_bus import Event, EventBus
from .music_library import LibraryStore, InvalidLibraryState
from .music_manager import MusicManager
from .navigator import Navigator
from .player_backend import PlayerBackend, BackendRegistry, backend_registry
from .audio_player import AudioPlayer
from .widget_backends import SoundCloudBackend, YouTubeBackend
from .source_classifier import classify, extract_video_id

__all__ = [
    'Event',
    'EventBus',
    'LibraryStore',
    'InvalidLibraryState',
    'MusicManager',
    'Navigator',
    'PlayerBackend',
    'BackendRegistry',
    'backend_registry',
    'AudioPlayer',
    'SoundCloudBackend',
    'YouTubeBackend',
    'classify',
    'extract_video_id',
]
