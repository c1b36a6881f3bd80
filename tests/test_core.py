from __future__ import annotations

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from tetris67.game import (
    Action,
    CalloutTier,
    CellValue,
    GameConfig,
    GamePhase,
    GameStateManager,
    GridPosition,
    HardDropped,
    Locked,
    Moved,
    NoActivity,
    PieceType,
    Rejected,
    Rotation,
    ScoreEventKind,
    create_empty_board,
    fixed_sequence,
)

from conftest import make_board, make_piece, playing_state


def manager_for(state, *upcoming: PieceType) -> GameStateManager:
    return GameStateManager(generator=fixed_sequence(upcoming or (PieceType.O,)), state=state)


# ----- lifecycle -----


def test_new_manager_is_idle_and_rejects_gameplay():
    game = GameStateManager(generator=fixed_sequence([PieceType.T]))
    assert game.state.phase is GamePhase.IDLE
    assert game.state.active_piece is None
    assert game.state.next_piece is PieceType.T
    assert isinstance(game.tick(), NoActivity)
    assert isinstance(game.move_active_piece("left"), Rejected)
    assert isinstance(game.rotate_active_piece("cw"), Rejected)
    assert isinstance(game.soft_drop(), Rejected)
    assert isinstance(game.hard_drop_active_piece(), Rejected)


def test_start_game_spawns_centred_piece():
    game = GameStateManager(generator=fixed_sequence([PieceType.O, PieceType.T, PieceType.S]))
    state = game.start_game()
    assert state is game.state
    assert state.phase is GamePhase.PLAYING
    assert state.active_piece == make_piece(PieceType.T, 0, 3)
    assert state.next_piece is PieceType.S
    assert (state.score, state.level, state.lines_cleared, state.combo_count) == (0, 1, 0, 0)
    assert not state.board.any()


@pytest.mark.parametrize(
    "kind, col",
    [(PieceType.I, 3), (PieceType.O, 4), (PieceType.J, 3), (PieceType.SIX, 4), (PieceType.SEVEN, 4)],
)
def test_spawn_column_depends_on_matrix_width(kind, col):
    game = manager_for(playing_state(create_empty_board(), None, next_piece=kind))
    assert game.spawn_piece() is True
    assert game.state.active_piece.position == GridPosition(0, col)


def test_start_game_resets_previous_session():
    board = make_board(rows={19: CellValue.I}, holes=[(19, 0)])
    state = playing_state(board, None, score=500, level=4, lines_cleared=33, combo_count=2, phase=GamePhase.GAME_OVER)
    game = manager_for(state, PieceType.T)
    fresh = game.start_game()
    assert (fresh.score, fresh.level, fresh.lines_cleared, fresh.combo_count) == (0, 1, 0, 0)
    assert not fresh.board.any()
    assert fresh.phase is GamePhase.PLAYING


def test_pause_and_resume():
    game = GameStateManager(generator=fixed_sequence([PieceType.T]))
    assert game.pause().phase is GamePhase.IDLE
    game.start_game()
    before = game.state
    assert game.pause().phase is GamePhase.PAUSED
    assert isinstance(game.tick(), NoActivity)
    assert isinstance(game.move_active_piece("left"), Rejected)
    assert isinstance(game.hard_drop_active_piece(), Rejected)
    assert game.state.active_piece == before.active_piece
    assert game.pause().phase is GamePhase.PAUSED
    assert game.resume().phase is GamePhase.PLAYING
    assert game.resume().phase is GamePhase.PLAYING
    assert isinstance(game.move_active_piece("left"), Moved)


# ----- movement commands -----


def test_move_and_rotate_replace_snapshot():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.T, 5, 3)))
    first = game.state
    result = game.move_active_piece("right")
    assert isinstance(result, Moved)
    assert result.state is game.state
    assert game.state.active_piece.position == GridPosition(5, 4)
    assert first.active_piece.position == GridPosition(5, 3)

    result = game.rotate_active_piece("ccw")
    assert isinstance(result, Moved)
    assert game.state.active_piece.rotation is Rotation.CCW

    result = game.move_active_piece("down")
    assert isinstance(result, Moved)
    assert game.state.active_piece.position == GridPosition(6, 4)
    assert game.state.score == 0


def test_blocked_move_is_rejected_without_change():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 5, 0)))
    before = game.state
    result = game.move_active_piece("left")
    assert isinstance(result, Rejected)
    assert game.state is before


def test_soft_drop_awards_one_point_per_row():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 16, 4), score=10))
    first = game.soft_drop()
    assert isinstance(first, Moved) and first.points == 1
    second = game.soft_drop()
    assert isinstance(second, Moved)
    third = game.soft_drop()
    assert isinstance(third, Rejected)
    assert game.state.score == 12
    assert game.state.active_piece.position == GridPosition(18, 4)


def test_soft_drop_never_locks():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 18, 4)))
    result = game.soft_drop()
    assert isinstance(result, Rejected)
    assert game.state.active_piece == make_piece(PieceType.O, 18, 4)
    assert not game.state.board.any()


# ----- gravity and locking -----


def test_tick_moves_then_locks():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 17, 4)), PieceType.T)
    assert isinstance(game.tick(), Moved)
    result = game.tick()
    assert isinstance(result, Locked)
    lock = result.lock
    assert lock.cleared_rows == ()
    assert lock.score_event is None
    assert lock.combo_triggered is False
    assert lock.game_over is False
    assert result.callout is None
    board = game.state.board
    assert board[18:, 4:6].tolist() == [[CellValue.O] * 2] * 2
    assert np.count_nonzero(board) == 4
    assert lock.board is board
    # queued O spawns, T is queued next
    assert game.state.active_piece == make_piece(PieceType.O, 0, 4)
    assert game.state.next_piece is PieceType.T


def test_scenario_single_line_with_long_bar():
    board = make_board(rows={19: CellValue.O}, holes=[(19, 3), (19, 4), (19, 5), (19, 6)])
    game = manager_for(playing_state(board, make_piece(PieceType.I, 0, 3)))
    result = game.hard_drop_active_piece()
    assert isinstance(result, HardDropped)
    assert result.distance == 18
    assert result.drop_score == 36
    assert result.lock.cleared_rows == (19,)
    event = result.lock.score_event
    assert event.kind is ScoreEventKind.SINGLE
    assert (event.lines, event.level, event.points) == (1, 1, 100)
    state = game.state
    assert state.score == 36 + 100
    assert state.lines_cleared == 1
    assert not state.board.any()
    assert result.callout.tier is CalloutTier.C
    assert result.callout.position == GridPosition(19, 5)


def test_line_clear_uses_level_at_time_of_event():
    board = make_board(rows={18: CellValue.L, 19: CellValue.J}, holes=[(18, 4), (18, 5), (19, 4), (19, 5)])
    state = playing_state(board, make_piece(PieceType.O, 0, 4), level=3, lines_cleared=20, score=1000)
    game = manager_for(state)
    result = game.hard_drop_active_piece()
    assert result.lock.cleared_rows == (18, 19)
    assert result.lock.score_event.kind is ScoreEventKind.DOUBLE
    assert result.lock.score_event.points == 900
    assert game.state.score == 1000 + 36 + 900
    assert game.state.lines_cleared == 22
    assert game.state.level == 3


def test_rows_above_a_clear_shift_down():
    board = make_board(
        rows={19: CellValue.Z},
        holes=[(19, 8), (19, 9)],
        cells={(18, 0): CellValue.T, (17, 0): CellValue.T},
    )
    game = manager_for(playing_state(board, make_piece(PieceType.O, 0, 8)))
    result = game.hard_drop_active_piece()
    assert result.lock.cleared_rows == (19,)
    board = game.state.board
    # O's top half (row 18) and the T stack fall one row
    assert board[19].tolist() == [CellValue.T] + [0] * 7 + [CellValue.O] * 2
    assert board[18, 0] == CellValue.T
    assert np.count_nonzero(board) == 4


def test_scenario_combo_clears_board():
    game = GameStateManager(
        generator=fixed_sequence([PieceType.O, PieceType.SIX, PieceType.SEVEN, PieceType.O])
    )
    game.start_game()
    assert game.state.active_piece == make_piece(PieceType.SIX, 0, 4)

    first = game.hard_drop_active_piece()
    assert first.distance == 17
    assert first.lock.combo_triggered is False
    assert game.state.board[17, 4] == CellValue.SIX
    assert game.state.active_piece == make_piece(PieceType.SEVEN, 0, 4)

    assert isinstance(game.move_active_piece("right"), Moved)
    second = game.hard_drop_active_piece()
    assert second.distance == 17
    lock = second.lock
    assert lock.combo_triggered is True
    assert lock.cleared_rows == ()
    # the SEVEN's stem also sits right of the SIX's lower half
    assert lock.combo_pairs == (GridPosition(17, 4), GridPosition(18, 5), GridPosition(19, 5))
    assert lock.score_event.kind is ScoreEventKind.COMBO
    assert (lock.score_event.lines, lock.score_event.points) == (0, 6700)
    assert not lock.board.any()

    state = game.state
    assert not state.board.any()
    assert state.combo_count == 1
    assert state.score == 34 + 34 + 6700
    assert state.lines_cleared == 0
    assert state.phase is GamePhase.PLAYING
    assert second.callout.tier is CalloutTier.S
    assert second.callout.position == GridPosition(17, 4)


def test_combo_takes_precedence_over_full_rows():
    board = make_board(rows={19: CellValue.O}, holes=[(19, 6)], cells={(17, 4): CellValue.SIX})
    state = playing_state(board, make_piece(PieceType.SEVEN, 0, 5), level=2)
    game = manager_for(state)
    result = game.hard_drop_active_piece()
    assert result.distance == 17
    lock = result.lock
    assert lock.combo_triggered is True
    assert lock.cleared_rows == ()
    assert lock.score_event.kind is ScoreEventKind.COMBO
    assert lock.score_event.points == 13400
    assert game.state.score == 34 + 13400
    assert game.state.lines_cleared == 0
    assert not game.state.board.any()


def test_scenario_blocked_spawn_ends_game():
    board = make_board(rows={0: CellValue.Z, 1: CellValue.Z}, holes=[(0, 0), (1, 0)])
    game = manager_for(playing_state(board, None, next_piece=PieceType.O))
    assert game.spawn_piece() is False
    state = game.state
    assert state.phase is GamePhase.GAME_OVER
    assert state.active_piece is None

    assert isinstance(game.tick(), NoActivity)
    assert isinstance(game.move_active_piece("left"), Rejected)
    assert isinstance(game.move_active_piece("down"), Rejected)
    assert isinstance(game.rotate_active_piece("cw"), Rejected)
    assert isinstance(game.soft_drop(), Rejected)
    assert isinstance(game.hard_drop_active_piece(), Rejected)
    assert game.pause().phase is GamePhase.GAME_OVER
    assert game.resume().phase is GamePhase.GAME_OVER
    assert game.state is state

    fresh = game.start_game()
    assert fresh.phase is GamePhase.PLAYING
    assert fresh.active_piece is not None


def test_lock_that_blocks_next_spawn_ends_game():
    board = make_board(cells={(r, 4): CellValue.I for r in range(2, 20)})
    game = manager_for(playing_state(board, make_piece(PieceType.O, 0, 4), score=50))
    result = game.tick()
    assert isinstance(result, Locked)
    assert result.lock.game_over is True
    assert result.callout.tier is CalloutTier.GAME_OVER
    state = game.state
    assert state.phase is GamePhase.GAME_OVER
    assert state.active_piece is None
    assert state.board[0:2, 4:6].tolist() == [[CellValue.O] * 2] * 2
    assert state.score == 50
    assert isinstance(game.tick(), NoActivity)


def test_scenario_tenth_line_levels_up():
    board = make_board(rows={19: CellValue.O}, holes=[(19, 3), (19, 4), (19, 5), (19, 6)])
    game = manager_for(playing_state(board, make_piece(PieceType.I, 0, 3), lines_cleared=9))
    assert game.drop_interval == 1000
    result = game.hard_drop_active_piece()
    assert result.lock.score_event.level == 1
    assert result.lock.score_event.points == 100
    assert game.state.lines_cleared == 10
    assert game.state.level == 2
    assert game.drop_interval == 900
    assert result.callout.tier is CalloutTier.A


def test_ten_single_clears_across_locks():
    game = manager_for(playing_state(create_empty_board(), None))
    for _ in range(10):
        board = make_board(rows={19: CellValue.O}, holes=[(19, 3), (19, 4), (19, 5), (19, 6)])
        state = game.state
        game = manager_for(
            playing_state(
                board,
                make_piece(PieceType.I, 0, 3),
                score=state.score,
                level=state.level,
                lines_cleared=state.lines_cleared,
            )
        )
        game.hard_drop_active_piece()
    assert game.state.lines_cleared == 10
    assert game.state.level == 2
    assert game.state.score == 10 * (36 + 100)


# ----- snapshots and views -----


def test_snapshots_are_not_mutated():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 17, 4)))
    before = game.state
    game.tick()
    game.tick()
    assert before.active_piece == make_piece(PieceType.O, 17, 4)
    assert not before.board.any()
    assert not game.state.board.flags.writeable
    with pytest.raises(FrozenInstanceError):
        game.state.score = 10


def test_score_and_lines_never_decrease():
    game = GameStateManager(config=GameConfig(random_seed=3))
    game.start_game()
    last_score, last_lines = 0, 0
    for i in range(400):
        if game.state.phase is not GamePhase.PLAYING:
            break
        game.step(Action(i % len(Action)))
        game.tick()
        assert game.state.score >= last_score
        assert game.state.lines_cleared >= last_lines
        assert game.state.board.shape == (20, 10)
        last_score, last_lines = game.state.score, game.state.lines_cleared


def test_board_view_overlays_falling_piece():
    game = manager_for(playing_state(make_board(cells={(19, 0): CellValue.J}), make_piece(PieceType.T, -1, 3)))
    view = game.board_view()
    assert view[19, 0] == CellValue.J
    # only the bottom row of the T is on the board
    assert view[0, 3:6].tolist() == [-int(CellValue.T)] * 3
    assert np.count_nonzero(view) == 4
    assert not game.state.board[0].any()


def test_ghost_position():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.O, 3, 0)))
    assert game.ghost_position() == GridPosition(18, 0)
    idle = GameStateManager(generator=fixed_sequence([PieceType.O]))
    assert idle.ghost_position() is None


def test_step_dispatches_actions():
    game = manager_for(playing_state(create_empty_board(), make_piece(PieceType.T, 5, 4)))
    assert isinstance(game.step(Action.LEFT), Moved)
    assert isinstance(game.step(Action.RIGHT), Moved)
    assert isinstance(game.step(Action.ROTATE_CW), Moved)
    assert isinstance(game.step(Action.ROTATE_CCW), Moved)
    assert game.step(Action.SOFT_DROP).points == 1
    assert isinstance(game.step(Action.NONE), NoActivity)
    assert isinstance(game.step(Action.HARD_DROP), HardDropped)


def test_seeded_games_are_reproducible():
    a = GameStateManager(config=GameConfig(random_seed=11))
    b = GameStateManager(config=GameConfig(random_seed=11))
    a.start_game()
    b.start_game()
    for _ in range(30):
        ra, rb = a.hard_drop_active_piece(), b.hard_drop_active_piece()
        assert type(ra) is type(rb)
        assert np.array_equal(a.state.board, b.state.board)
        assert a.state.next_piece == b.state.next_piece


def test_generator_returning_unknown_piece_fails_loudly():
    with pytest.raises(ValueError):
        GameStateManager(generator=lambda: "X")


def test_callouts_do_not_change_piece_sequence():
    board = make_board(rows={19: CellValue.O}, holes=[(19, 3), (19, 4), (19, 5), (19, 6)])
    clearing = GameStateManager(config=GameConfig(random_seed=5), state=playing_state(board, make_piece(PieceType.I, 0, 3)))
    quiet = GameStateManager(
        config=GameConfig(random_seed=5),
        state=playing_state(create_empty_board(), make_piece(PieceType.I, 0, 3)),
    )
    first = clearing.hard_drop_active_piece()
    assert first.callout is not None
    assert quiet.hard_drop_active_piece().callout is None

    clearing_pieces, quiet_pieces = [], []
    for _ in range(5):
        clearing_pieces.append(clearing.state.next_piece)
        quiet_pieces.append(quiet.state.next_piece)
        clearing.hard_drop_active_piece()
        quiet.hard_drop_active_piece()
    assert clearing_pieces == quiet_pieces
