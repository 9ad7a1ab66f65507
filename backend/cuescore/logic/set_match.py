"""
Set-Match rules: nine-ball racks played as sets, first to target_sets wins.

Nobody is active when a Set-Match starts; the first action selects the
shooter. Per-rack score is transient and cleared on every set win, while
sets_won and the score history carry the match result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from cuescore.logic.actions import WinSetData, parse_action_data
from cuescore.logic.engine import GameEngine
from cuescore.logic.enums import GameAction, GameStatus, GameType
from cuescore.logic.exceptions import InvalidActionError
from cuescore.logic.state import Game, Player, ScoreHistoryEntry, VictoryResult
from cuescore.logic.state_utils import append_score_entry, reset_rack_state, update_player

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from cuescore.logic.state import PlayerSetup

NINE_BALL = 9
NINE_BALL_SCORE = 10
SET_WIN_MARKER = 1


class SetMatchEngine(GameEngine):
    game_type: ClassVar[GameType] = GameType.SET_MATCH
    ball_numbers: ClassVar[tuple[int, ...]] = tuple(range(1, 10))

    def ball_score(self, ball_number: int) -> int:
        return NINE_BALL_SCORE if ball_number == NINE_BALL else 1

    def initialize_players(self, setups: Sequence[PlayerSetup]) -> tuple[Player, ...]:
        players = super().initialize_players(setups)
        return tuple(p.model_copy(update={"is_active": False}) for p in players)

    def handle_pocket_ball(self, game: Game, ball_number: int) -> Game:
        return self.pocket_for_current_player(game, ball_number)

    def check_victory_condition(self, game: Game) -> VictoryResult:
        for player in game.players:
            if player.target_sets is not None and player.sets_won >= player.target_sets:
                return VictoryResult(is_game_over=True, winner_id=player.id)
        return VictoryResult(is_game_over=False)

    def handle_custom_action(
        self,
        game: Game,
        action: GameAction,
        data: Mapping[str, Any] | None = None,
    ) -> Game:
        if action == GameAction.WIN_SET:
            payload = parse_action_data(WinSetData, data)
            return self.win_set(game, payload.player_id)
        if action == GameAction.RESET_RACK:
            return self.reset_rack(game)
        return super().handle_custom_action(game, action, data)

    def win_set(self, game: Game, winner_id: str) -> Game:
        """
        Award a set to winner_id and start the next rack.

        Completes the game in the same step when the winner reaches their
        target. Completed games are returned unchanged.
        """
        if game.status == GameStatus.COMPLETED:
            return game
        winner_index = game.player_index(winner_id)
        if winner_index is None:
            raise InvalidActionError(f"unknown player {winner_id!r}")

        updated = reset_rack_state(game, reset_score=True)
        updated = update_player(updated, winner_index, sets_won=game.players[winner_index].sets_won + 1)
        updated = append_score_entry(updated, ScoreHistoryEntry(player_id=winner_id, score=SET_WIN_MARKER))
        updated = updated.model_copy(update={"shot_history": (), "current_rack": game.current_rack + 1})
        return self.complete_if_won(updated)

    def reset_rack(self, game: Game) -> Game:
        """Clear the rack: per-rack scores, pocketed balls and shots."""
        return reset_rack_state(game, reset_score=True).model_copy(update={"shot_history": ()})

    def handle_undo(self, game: Game) -> Game:
        """
        Reverse the latest pocket, or the latest set win when the rack is empty.

        Undoing a set win pops its score-history entry, takes the set back
        from that player and rewinds the rack counter. A game completed by
        that set returns to in-progress.
        """
        if game.shot_history:
            return super().handle_undo(game)
        if not game.score_history:
            return game

        entry = game.score_history[-1]
        updated = game.model_copy(
            update={"score_history": game.score_history[:-1], "current_rack": max(1, game.current_rack - 1)},
        )
        index = updated.player_index(entry.player_id)
        if index is not None:
            updated = update_player(updated, index, sets_won=max(0, updated.players[index].sets_won - 1))

        return self.reopen_if_undecided(updated)
