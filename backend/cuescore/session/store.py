"""
Game session store: the single place where engines are invoked.

Holds the current immutable Game snapshot, runs every action through the
engine for the active game type, replaces the snapshot with the result
and notifies listeners. Actions are applied one at a time by the caller;
the store holds no locks.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from cuescore.logic.enums import GameAction, GameStatus, GameType
from cuescore.logic.exceptions import GameRuleError
from cuescore.logic.factory import get_engine
from cuescore.logic.state import Game, PlayerSetup, VictoryResult, utc_now
from cuescore.logic.state_utils import activate_player
from cuescore.session.stats import parse_player_stats, record_game_result
from shared.storage import InMemoryStatsStorage

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from cuescore.logic.engine import GameEngine
    from cuescore.logic.settings import ChessClockSettings, JapanSettings
    from cuescore.session.stats import PlayerStats
    from shared.storage import StatsStorage

logger = structlog.get_logger()

Listener = Callable[[Game | None], None]
DEFAULT_HISTORY_LIMIT = 100
# the only actions still accepted once a game is completed
UNDO_ACTIONS = frozenset({GameAction.UNDO_LAST_SHOT.value, GameAction.UNDO_BOWLING_ROLL.value})


def _to_setup(setup: PlayerSetup | Mapping[str, Any]) -> PlayerSetup:
    if isinstance(setup, PlayerSetup):
        return setup
    return PlayerSetup.model_validate(dict(setup))


class GameSessionStore:
    """
    In-memory holder of the current game plus finished-game history and stats.

    Rule violations raised by an engine are logged and leave the current
    snapshot unchanged. A completed game accepts only undo actions.
    Finished games and stats are handed to the storage collaborator on
    every game end.
    """

    def __init__(
        self,
        storage: StatsStorage | None = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._storage = storage or InMemoryStatsStorage()
        self._history_limit = history_limit
        self._game: Game | None = None
        self._listeners: list[Listener] = []
        # snapshots taken right before an automatic rack reset, newest last
        self._rack_snapshots: list[Game] = []
        self._player_stats = parse_player_stats(self._storage.load_stats())
        self._game_history = self._load_history()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_game(self) -> Game | None:
        return self._game

    @property
    def game_history(self) -> tuple[Game, ...]:
        return tuple(self._game_history)

    @property
    def player_stats(self) -> tuple[PlayerStats, ...]:
        return self._player_stats

    def check_all_balls_pocketed(self) -> bool:
        if self._game is None:
            return False
        return get_engine(self._game.type).check_all_balls_pocketed(self._game)

    def check_victory_condition(self) -> VictoryResult:
        if self._game is None:
            return VictoryResult(is_game_over=False)
        return get_engine(self._game.type).check_victory_condition(self._game)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for new snapshots. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(
        self,
        setups: Iterable[PlayerSetup | Mapping[str, Any]],
        game_type: GameType | str,
        *,
        chess_clock: ChessClockSettings | None = None,
        japan_settings: JapanSettings | None = None,
    ) -> Game:
        """
        Start a new game, replacing any current one.

        Raises:
            UnsupportedGameTypeError: If game_type has no engine
            GameRuleError: If the setups or settings cannot start a game

        """
        engine = get_engine(game_type)
        game = engine.initialize_game(
            [_to_setup(setup) for setup in setups],
            chess_clock=chess_clock,
            japan_settings=japan_settings,
        )
        self._rack_snapshots.clear()
        structlog.contextvars.bind_contextvars(game_id=game.id)
        logger.info("game started", game_type=game.type, players=len(game.players))
        self._publish(game)
        return game

    def start_rematch(self, finished_game: Game) -> Game:
        """Start a new game with the same players, targets, type and settings."""
        setups = [
            PlayerSetup(name=p.name, target_score=p.target_score, target_sets=p.target_sets)
            for p in finished_game.players
        ]
        return self.start_game(
            setups,
            finished_game.type,
            chess_clock=finished_game.chess_clock,
            japan_settings=finished_game.japan_settings,
        )

    def end_game(self, winner_id: str | None = None) -> Game | None:
        """
        Finish the current game and record it.

        The engine settles any open state first (Japan closes the rack in
        progress). The winner is winner_id, else the winner already stamped
        by a victory, else whoever the victory check names. The finished game
        is appended to history, stats are updated and both are persisted.
        """
        game = self._game
        if game is None:
            return None
        engine = get_engine(game.type)
        finalized = engine.finalize_game(game)

        if winner_id is not None and finalized.get_player(winner_id) is None:
            logger.warning("unknown winner ignored", winner_id=winner_id)
            winner_id = None
        winner = winner_id or finalized.winner or engine.check_victory_condition(finalized).winner_id

        finished = finalized.model_copy(
            update={
                "status": GameStatus.COMPLETED,
                "winner": winner,
                "end_time": finalized.end_time or utc_now(),
                "rack_in_progress": False,
            },
        )
        self._game_history = [*self._game_history, finished][-self._history_limit :]
        self._player_stats = record_game_result(self._player_stats, finished)
        self._persist()
        logger.info("game ended", winner=winner, racks=finished.current_rack)

        self._rack_snapshots.clear()
        structlog.contextvars.unbind_contextvars("game_id")
        self._publish(None)
        return finished

    def reset_game(self) -> None:
        """Drop the current game without recording it."""
        self._rack_snapshots.clear()
        structlog.contextvars.unbind_contextvars("game_id")
        self._publish(None)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def pocket_ball(self, ball_number: int) -> Game | None:
        """
        Pocket a ball for the current player.

        A pocket that satisfies the victory condition completes the game.
        Otherwise, for games that rerack automatically, pocketing the last
        ball resets the rack.
        """

        def _pocket(engine: GameEngine, game: Game) -> Game:
            updated = engine.handle_pocket_ball(game, ball_number)
            if updated is game:
                return game
            completed = self._complete_on_victory(engine, updated)
            if completed is not updated:
                return completed
            if engine.auto_reset_rack and engine.check_all_balls_pocketed(updated):
                self._rack_snapshots.append(updated)
                logger.info("rack cleared, resetting", rack=updated.current_rack)
                return engine.handle_custom_action(updated, GameAction.RESET_RACK)
            return updated

        return self._apply("pocket_ball", _pocket)

    def switch_player(self) -> Game | None:
        return self._apply("switch_player", lambda engine, game: engine.handle_switch_player(game))

    def switch_to_player(self, index: int) -> Game | None:
        """Make the player at index active. Out-of-range indexes are ignored."""
        return self._apply("switch_to_player", lambda _engine, game: activate_player(game, index))

    def undo_last_shot(self) -> Game | None:
        """
        Undo the most recent event.

        Right after an automatic rack reset the rack that was just cleared
        is restored first, so the undo lands on its final shot.
        """

        def _undo(engine: GameEngine, game: Game) -> Game:
            if self._rack_snapshots and self._is_fresh_rack_after(game, self._rack_snapshots[-1]):
                game = self._rack_snapshots.pop()
            return engine.handle_custom_action(game, GameAction.UNDO_LAST_SHOT)

        return self._apply("undo_last_shot", _undo)

    def handle_game_action(self, action: GameAction | str, data: Mapping[str, Any] | None = None) -> Game | None:
        """
        Dispatch a type-specific action to the engine.

        An action other than an undo that satisfies the victory condition
        completes the game, as a pocket does (a Bowlard roll that finishes
        the tenth frame).
        """
        try:
            game_action = GameAction(action)
        except ValueError:
            logger.warning("unknown game action", action=action)
            return self._game

        def _dispatch(engine: GameEngine, game: Game) -> Game:
            updated = engine.handle_custom_action(game, game_action, data)
            if updated is game or game_action.value in UNDO_ACTIONS:
                return updated
            return self._complete_on_victory(engine, updated)

        return self._apply(game_action.value, _dispatch)

    def win_set(self, player_id: str) -> Game | None:
        return self.handle_game_action(GameAction.WIN_SET, {"player_id": player_id})

    def reset_rack(self) -> Game | None:
        return self.handle_game_action(GameAction.RESET_RACK)

    def add_pins(self, pins: int) -> Game | None:
        return self.handle_game_action(GameAction.ADD_PINS, {"pins": pins})

    def undo_bowling_roll(self) -> Game | None:
        return self.handle_game_action(GameAction.UNDO_BOWLING_ROLL)

    def next_rack(self) -> Game | None:
        return self.handle_game_action(GameAction.NEXT_RACK)

    def change_player_order(self, selected_player_id: str) -> Game | None:
        return self.handle_game_action(GameAction.PLAYER_ORDER_CHANGE, {"selected_player_id": selected_player_id})

    def set_multiplier(self, value: int) -> Game | None:
        return self.handle_game_action(GameAction.SET_MULTIPLIER, {"value": value})

    def apply_deduction(self, value: int) -> Game | None:
        return self.handle_game_action(GameAction.APPLY_DEDUCTION, {"value": value})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(self, action: str, fn: Callable[[GameEngine, Game], Game]) -> Game | None:
        game = self._game
        if game is None:
            return None
        if game.status == GameStatus.COMPLETED and action not in UNDO_ACTIONS:
            logger.info("action on completed game ignored", action=action)
            return game
        try:
            updated = fn(get_engine(game.type), game)
        except GameRuleError as e:
            logger.warning("invalid game action", action=action, reason=str(e))
            return game
        if updated is not game:
            self._publish(updated)
        return updated

    def _publish(self, game: Game | None) -> None:
        self._game = game
        for listener in list(self._listeners):
            listener(game)

    @staticmethod
    def _complete_on_victory(engine: GameEngine, game: Game) -> Game:
        completed = engine.complete_if_won(game)
        if completed is not game:
            logger.info("victory reached", winner=completed.winner)
        return completed

    @staticmethod
    def _is_fresh_rack_after(game: Game, snapshot: Game) -> bool:
        return game.id == snapshot.id and not game.shot_history and game.current_rack == snapshot.current_rack + 1

    def _load_history(self) -> list[Game]:
        history: list[Game] = []
        for record in self._storage.load_history():
            try:
                history.append(Game.model_validate(record))
            except ValidationError:
                logger.exception("malformed game history, starting empty")
                return []
        return history[-self._history_limit :]

    def _persist(self) -> None:
        """Best-effort write of stats and history to storage."""
        try:
            self._storage.save_stats([entry.model_dump(mode="json") for entry in self._player_stats])
            self._storage.save_history([game.model_dump(mode="json") for game in self._game_history])
        except OSError:
            logger.exception("failed to persist stats and history")
