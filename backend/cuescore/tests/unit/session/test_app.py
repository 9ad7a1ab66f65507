from cuescore.logic.enums import GameType
from cuescore.session.app import create_session_store
from cuescore.session.settings import CuescoreSettings
from shared.storage import HISTORY_FILENAME, STATS_FILENAME, InMemoryStatsStorage


class TestCreateSessionStore:
    def test_file_storage_under_data_dir(self, tmp_path):
        settings = CuescoreSettings(data_dir=str(tmp_path / "data"))
        store = create_session_store(settings)

        store.start_game([{"name": "Alice"}, {"name": "Bob"}], GameType.SET_MATCH)
        store.end_game("player-1")

        assert (tmp_path / "data" / STATS_FILENAME).exists()
        assert (tmp_path / "data" / HISTORY_FILENAME).exists()

    def test_reopened_store_sees_previous_games(self, tmp_path):
        settings = CuescoreSettings(data_dir=str(tmp_path))
        first = create_session_store(settings)
        first.start_game([{"name": "Alice"}], GameType.BOWLARD)
        finished = first.end_game()

        second = create_session_store(settings)

        assert second.game_history == (finished,)
        assert second.player_stats == first.player_stats

    def test_explicit_storage_and_history_limit(self):
        storage = InMemoryStatsStorage()
        store = create_session_store(CuescoreSettings(data_dir="unused", history_limit=1), storage)

        for _ in range(2):
            store.start_game([{"name": "Alice"}], GameType.ROTATION)
            store.end_game()

        assert len(storage.load_history()) == 1
