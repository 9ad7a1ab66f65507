from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from cuescore.logic.enums import GameAction, GameStatus, GameType
from cuescore.logic.exceptions import InvalidBallError, InvalidSetupError
from cuescore.logic.state import Game, Player, Shot, utc_now
from cuescore.logic.state_utils import (
    activate_player,
    append_shot,
    is_ball_pocketed,
    pocketed_balls,
    update_player,
)
from cuescore.logic.undo import undo_last_shot

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from cuescore.logic.settings import ChessClockSettings, JapanSettings
    from cuescore.logic.state import PlayerSetup, VictoryResult


def make_player_id(index: int) -> str:
    return f"player-{index + 1}"


def new_game_id() -> str:
    return f"game-{uuid.uuid4().hex}"


class GameEngine(ABC):
    """
    Rules for one game type.

    Engines are stateless: every method takes a Game snapshot and returns a
    new one (or a query result). Actions an engine does not understand
    return the snapshot unchanged.
    """

    game_type: ClassVar[GameType]
    ball_numbers: ClassVar[tuple[int, ...]] = ()
    # racks are reset automatically by the session once every ball is down
    auto_reset_rack: ClassVar[bool] = False

    def ball_score(self, ball_number: int) -> int:  # noqa: ARG002
        """Points for pocketing ball_number."""
        return 1

    def initialize_players(self, setups: Sequence[PlayerSetup]) -> tuple[Player, ...]:
        """Build the starting roster. The first player starts active."""
        if not setups:
            raise InvalidSetupError("at least one player is required")
        return tuple(
            Player(
                id=make_player_id(index),
                name=setup.name,
                is_active=index == 0,
                target_score=setup.target_score,
                target_sets=setup.target_sets,
            )
            for index, setup in enumerate(setups)
        )

    def initialize_game(
        self,
        setups: Sequence[PlayerSetup],
        *,
        game_id: str | None = None,
        chess_clock: ChessClockSettings | None = None,
        japan_settings: JapanSettings | None = None,  # noqa: ARG002
    ) -> Game:
        """
        Create a new in-progress game with empty history.

        japan_settings is ignored by every engine except Japan.
        """
        return Game(
            id=game_id or new_game_id(),
            type=self.game_type,
            status=GameStatus.IN_PROGRESS,
            players=self.initialize_players(setups),
            current_player_index=0,
            total_racks=1,
            current_rack=1,
            rack_in_progress=True,
            chess_clock=chess_clock,
        )

    @abstractmethod
    def handle_pocket_ball(self, game: Game, ball_number: int) -> Game:
        """Record ball_number as pocketed by the current player."""
        ...

    def handle_switch_player(self, game: Game) -> Game:
        """Make the next player in seating order the only active player."""
        return activate_player(game, (game.current_player_index + 1) % len(game.players))

    @abstractmethod
    def check_victory_condition(self, game: Game) -> VictoryResult:
        ...

    def handle_custom_action(
        self,
        game: Game,
        action: GameAction,
        data: Mapping[str, Any] | None = None,  # noqa: ARG002
    ) -> Game:
        """
        Handle a type-specific action.

        Subclasses handle their own actions and defer to this for the rest.
        """
        if action == GameAction.UNDO_LAST_SHOT:
            return self.handle_undo(game)
        return game

    def handle_undo(self, game: Game) -> Game:
        """Reverse the most recent recorded event."""
        return self.reopen_if_undecided(undo_last_shot(game, self.ball_score))

    def finalize_game(self, game: Game) -> Game:
        """Hook run before a game is ended manually."""
        return game

    def complete_if_won(self, game: Game) -> Game:
        """Mark an in-progress game completed when the victory condition names a winner."""
        if game.status == GameStatus.COMPLETED:
            return game
        victory = self.check_victory_condition(game)
        if not victory.is_game_over or victory.winner_id is None:
            return game
        return game.model_copy(
            update={"status": GameStatus.COMPLETED, "winner": victory.winner_id, "end_time": utc_now()},
        )

    def reopen_if_undecided(self, game: Game) -> Game:
        """Return a completed game to in-progress once its victory condition no longer holds."""
        if game.status != GameStatus.COMPLETED or self.check_victory_condition(game).is_game_over:
            return game
        return game.model_copy(update={"status": GameStatus.IN_PROGRESS, "winner": None, "end_time": None})

    def check_all_balls_pocketed(self, game: Game) -> bool:
        """Check whether every ball in the set has been pocketed this rack."""
        return bool(self.ball_numbers) and set(self.ball_numbers) <= pocketed_balls(game)

    def validate_ball(self, ball_number: int) -> None:
        if ball_number not in self.ball_numbers:
            raise InvalidBallError(f"ball {ball_number} is not used in {self.game_type.value}")

    def pocket_for_current_player(self, game: Game, ball_number: int) -> Game:
        """
        Credit ball_number to the current player and record the shot.

        Already-pocketed balls are ignored so repeated taps are harmless.
        """
        self.validate_ball(ball_number)
        if is_ball_pocketed(game, ball_number):
            return game
        index = game.current_player_index
        shooter = game.players[index]
        updated = update_player(
            game,
            index,
            balls_pocketed=(*shooter.balls_pocketed, ball_number),
            score=shooter.score + self.ball_score(ball_number),
        )
        return append_shot(updated, Shot(player_id=shooter.id, ball_number=ball_number, is_sunk=True))
