import itertools

import pytest

from tests.conftest import location

ALBUMS = {
    "A": {"t1": "s1", "t2": "s2", "t3": "s3"},
    "B": {"t4": "s4", "t5": "s5"},
    "C": {"t6": "s6"},
}


def albums():
    return {folder: dict(tracks) for folder, tracks in ALBUMS.items()}


class TestSequential:
    def test_starts_on_first_track(self, make_manager):
        manager = make_manager()

        assert location(manager) == ("A", "t1")
        assert manager.position.src == "s1"

    def test_starts_on_first_playable_track(self, make_manager):
        manager = make_manager(albums(), {"s1": "skipped"})

        assert location(manager) == ("A", "t2")

    def test_next_and_previous_track(self, make_manager):
        manager = make_manager(albums())

        assert location(manager) == ("A", "t1")
        manager.next_track()
        assert location(manager) == ("A", "t2")
        manager.previous_track()
        assert location(manager) == ("A", "t1")

    def test_previous_wraps_to_the_last_track_without_pausing(self, make_manager):
        manager = make_manager(albums())
        manager.play()

        manager.previous_track()

        assert location(manager) == ("A", "t3")
        assert manager.is_playing

    def test_wrapping_past_the_end_pauses(self, make_manager):
        manager = make_manager(albums())
        manager.find_track("A", "t3")
        manager.play()

        manager.next_track()

        assert location(manager) == ("A", "t1")
        assert not manager.is_playing

    def test_skipped_track_at_the_end_wraps_and_pauses(self, make_manager):
        manager = make_manager(track_types={"s2": "skipped"})
        manager.play()

        manager.find_next_track(1)

        assert location(manager) == ("A", "t1")
        assert not manager.is_playing

    def test_skipped_tracks_are_stepped_over(self, make_manager):
        manager = make_manager(albums(), {"s2": "skipped"})

        manager.next_track()
        assert location(manager) == ("A", "t3")
        manager.previous_track()
        assert location(manager) == ("A", "t1")

    def test_step_zero_is_idempotent(self, make_manager):
        manager = make_manager(albums())
        manager.next_track()

        first = manager.find_next_track(0)
        second = manager.find_next_track(0)

        assert first == second
        assert location(manager) == ("A", "t2")


class TestFolders:
    def test_next_and_previous_folder(self, make_manager):
        manager = make_manager(albums())

        manager.next_folder()
        assert location(manager) == ("B", "t4")
        manager.next_folder()
        assert location(manager) == ("C", "t6")
        manager.next_folder()
        assert location(manager) == ("A", "t1")
        manager.previous_folder()
        assert location(manager) == ("C", "t6")

    def test_folder_change_does_not_pause(self, make_manager):
        manager = make_manager(albums())
        manager.play()

        manager.next_folder()
        manager.next_folder()
        manager.next_folder()

        assert manager.is_playing

    def test_skipped_folder_is_passed_over(self, make_manager):
        manager = make_manager(albums(), {"s4": "skipped", "s5": "skipped"})

        manager.next_folder()

        assert location(manager) == ("C", "t6")

    def test_lands_on_first_playable_track_of_folder(self, make_manager):
        manager = make_manager(albums(), {"s4": "skipped"})

        manager.next_folder()

        assert location(manager) == ("B", "t5")

    def test_skipping_whole_current_folder_moves_on(self, make_manager):
        manager = make_manager(albums(), {"s1": "skipped", "s2": "skipped", "s3": "skipped"})

        assert location(manager) == ("B", "t4")

    def test_every_folder_skipped_falls_back_to_first_track(self, make_manager):
        types = {f"s{i}": "skipped" for i in range(1, 7)}
        manager = make_manager(albums(), types)

        assert location(manager) == ("A", "t1")
        manager.next_folder()
        assert location(manager) == ("A", "t1")
        manager.next_track()
        assert location(manager) == ("A", "t1")


class TestFindTrack:
    def test_jumps_to_track(self, make_manager):
        manager = make_manager(albums())

        manager.find_track("B", "t5")

        assert location(manager) == ("B", "t5")
        assert manager.position.src == "s5"

    def test_skipped_target_lands_after_it(self, make_manager):
        manager = make_manager(albums(), {"s4": "skipped"})

        manager.find_track("B", "t4")

        assert location(manager) == ("B", "t5")

    def test_unknown_track_keeps_position(self, make_manager):
        manager = make_manager(albums())
        manager.next_track()

        manager.find_track("B", "nope")
        manager.find_track("Z", "t1")

        assert location(manager) == ("A", "t2")

    @pytest.mark.parametrize("toggle", ["toggle_shuffle", "toggle_shuffle_all", "toggle_liked_tracks"])
    def test_leaves_every_exclusive_mode(self, make_manager, toggle):
        manager = make_manager(albums(), {"s1": "liked", "s6": "liked"})
        getattr(manager, toggle)()
        assert manager.flags.active_modes()

        manager.find_track("B", "t4")

        assert manager.flags.active_modes() == []
        assert location(manager) == ("B", "t4")


class TestShuffle:
    def test_walks_every_track_of_the_folder(self, make_manager):
        manager = make_manager(albums())
        manager.toggle_shuffle()
        view = list(manager.navigator.shuffled_tracks("A"))

        seen = [manager.position.track]
        for _ in range(len(view) - 1):
            manager.next_track()
            seen.append(manager.position.track)

        assert seen == view
        assert manager.position.folder == "A"

    def test_step_zero_is_idempotent(self, make_manager):
        manager = make_manager(albums())
        manager.toggle_shuffle()
        manager.next_track()

        before = location(manager)
        manager.find_next_track(0)

        assert location(manager) == before

    def test_round_trip_restores_natural_order(self, make_manager):
        manager = make_manager(albums())
        manager.next_track()

        manager.toggle_shuffle()
        manager.toggle_shuffle()

        assert location(manager) == ("A", "t1")
        manager.next_track()
        assert location(manager) == ("A", "t2")

    def test_skipped_tracks_are_stepped_over(self, make_manager):
        manager = make_manager(albums(), {"s2": "skipped"})
        manager.toggle_shuffle()

        for _ in range(10):
            manager.next_track()
            assert manager.position.track != "t2"

    def test_reshuffle_keeps_folder_contents(self, make_manager):
        manager = make_manager(albums())

        manager.reshuffle()

        for folder, tracks in ALBUMS.items():
            assert manager.navigator.shuffled_tracks(folder) == tracks


class TestShuffleAll:
    def test_draws_tracks_from_the_whole_library_without_pausing(self, make_manager):
        manager = make_manager(albums())
        manager.play()
        manager.toggle_shuffle_all()

        seen = set()
        for _ in range(60):
            manager.next_track()
            assert manager.is_playing
            assert manager.position.track in ALBUMS[manager.position.folder]
            seen.add(location(manager))

        assert len(seen) > 1
        assert manager.position.src == ALBUMS[manager.position.folder][manager.position.track]


class TestLiked:
    def test_walks_the_liked_set_then_wraps_and_pauses(self, make_manager):
        manager = make_manager(albums(), {"s2": "liked", "s5": "liked"})
        manager.toggle_liked_tracks()
        manager.play()
        order = list(manager.navigator.liked)

        assert manager.position.src == order[0]
        manager.next_track()
        assert manager.position.src == order[1]
        assert manager.is_playing

        manager.next_track()
        assert manager.position.src == order[0]
        assert not manager.is_playing

    def test_previous_wraps_to_the_last_liked_track(self, make_manager):
        manager = make_manager(albums(), {"s2": "liked", "s5": "liked", "s6": "liked"})
        manager.toggle_liked_tracks()
        order = list(manager.navigator.liked)

        manager.previous_track()

        assert manager.position.src == order[-1]

    def test_only_liked_sources_are_visited(self, make_manager):
        manager = make_manager(albums(), {"s2": "liked", "s5": "liked", "s3": "skipped"})
        manager.toggle_liked_tracks()

        for _ in range(6):
            manager.next_track()
            assert manager.position.src in {"s2", "s5"}

    def test_duplicate_liked_source_resolves_to_last_location(self, make_manager):
        library = {"A": {"t1": "dup", "t2": "s2"}, "B": {"t3": "dup"}}
        manager = make_manager(library, {"dup": "liked"})

        manager.toggle_liked_tracks()

        assert manager.navigator.liked == {"dup": ("B", "t3")}
        assert location(manager) == ("B", "t3")


@pytest.mark.parametrize("mode, looping, seed", list(itertools.product(
    [None, "toggle_shuffle", "toggle_shuffle_all", "toggle_liked_tracks"],
    [False, True],
    range(3),
)))
def test_navigation_always_terminates_on_a_playable_track(make_manager, mode, looping, seed):
    types = {"s2": "skipped", "s4": "skipped", "s5": "skipped", "s3": "liked", "s6": "liked"}
    manager = make_manager(albums(), types, seed=seed)
    if looping:
        manager.toggle_loop()
    if mode:
        getattr(manager, mode)()

    moves = [manager.next_track, manager.previous_track, manager.next_folder, manager.previous_folder]
    for step in range(40):
        moves[step % len(moves)]()
        assert manager.position.track in ALBUMS[manager.position.folder]
        if not manager.is_shuffling_all:
            assert manager.position.src not in {"s2", "s4", "s5"}
