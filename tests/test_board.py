import unittest

import numpy as np

from connect4_remote.errors import ColumnFullError, InvalidColumnError
from connect4_remote.game.board import Board
from connect4_remote.utils import COLS, ROWS, Actor
from tests.fakes import replay_columns


class TestBoard(unittest.TestCase):
    def test_given_empty_board_when_inspected_then_every_column_is_legal(self):
        board = Board()
        self.assertTrue(board.is_empty())
        self.assertEqual(board.legal_columns(), set(range(COLS)))
        self.assertEqual(board.disc_count(), 0)
        self.assertEqual(board.grid.shape, (ROWS, COLS))

    def test_given_column_when_dropping_then_discs_stack_from_bottom(self):
        board = Board()
        self.assertEqual(board.drop(3, Actor.HUMAN), ROWS - 1)
        self.assertEqual(board.drop(3, Actor.SERVER), ROWS - 2)
        self.assertEqual(board.cell(ROWS - 1, 3), Actor.HUMAN)
        self.assertEqual(board.cell(ROWS - 2, 3), Actor.SERVER)
        self.assertEqual(board.lowest_empty_row(3), ROWS - 3)
        self.assertEqual(board.disc_count(Actor.HUMAN), 1)

    def test_given_prior_drops_when_dropping_then_row_counts_up_from_bottom(self):
        board = Board()
        for prior in range(ROWS):
            self.assertEqual(board.drop(6, Actor.HUMAN if prior % 2 else Actor.SERVER), ROWS - 1 - prior)
        with self.assertRaises(ColumnFullError):
            board.drop(6, Actor.HUMAN)

    def test_given_full_column_when_dropping_then_column_full_and_board_unchanged(self):
        board = replay_columns([0] * ROWS)
        before = board.copy()
        with self.assertRaises(ColumnFullError):
            board.drop(0, Actor.HUMAN)
        self.assertEqual(board, before)
        self.assertNotIn(0, board.legal_columns())
        self.assertIsNone(board.lowest_empty_row(0))

    def test_given_out_of_range_column_when_dropping_then_invalid_column(self):
        board = Board()
        for column in (-1, COLS, True, 2.0, "3"):
            with self.assertRaises(InvalidColumnError):
                board.drop(column, Actor.HUMAN)
        self.assertTrue(board.is_empty())

    def test_given_empty_actor_when_dropping_then_value_error(self):
        with self.assertRaises(ValueError):
            Board().drop(0, Actor.EMPTY)

    def test_given_board_when_copied_then_copies_are_independent(self):
        board = Board()
        board.drop(1, Actor.HUMAN)
        clone = board.copy()
        clone.drop(1, Actor.SERVER)
        self.assertEqual(board.disc_count(), 1)
        self.assertEqual(clone.disc_count(), 2)
        self.assertNotEqual(board, clone)

    def test_given_matrix_with_gap_when_loading_then_value_error(self):
        matrix = [[0] * COLS for _ in range(ROWS)]
        matrix[ROWS - 2][4] = 1  # floating above an empty cell
        with self.assertRaises(ValueError):
            Board.from_matrix(matrix)

    def test_given_malformed_matrix_when_loading_then_value_error(self):
        with self.assertRaises(ValueError):
            Board.from_matrix([[0] * COLS for _ in range(ROWS - 1)])
        with self.assertRaises(ValueError):
            Board.from_matrix([[0] * (COLS + 1) for _ in range(ROWS)])
        bad = [[0] * COLS for _ in range(ROWS)]
        bad[ROWS - 1][0] = 3
        with self.assertRaises(ValueError):
            Board.from_matrix(bad)
        with self.assertRaises(ValueError):
            Board.from_matrix([[0, 1], [2]])

    def test_given_non_integer_cells_when_loading_then_value_error(self):
        for cell in (1.5, 1.0, True, "1", None):
            matrix = [[0] * COLS for _ in range(ROWS)]
            matrix[ROWS - 1][3] = cell
            with self.assertRaises(ValueError, msg=repr(cell)):
                Board.from_matrix(matrix)

    def test_given_numpy_grid_when_loading_then_accepted(self):
        board = replay_columns([2, 2])
        self.assertEqual(Board.from_matrix(board.grid), board)

    def test_given_board_when_snapshotted_then_plain_nested_ints_round_trip(self):
        board = replay_columns([3, 3, 4])
        snapshot = board.snapshot()
        self.assertIsInstance(snapshot, list)
        self.assertIsInstance(snapshot[ROWS - 1][3], int)
        self.assertEqual(snapshot[ROWS - 1][3], Actor.HUMAN.value)
        self.assertEqual(snapshot[ROWS - 2][3], Actor.SERVER.value)
        self.assertEqual(snapshot[ROWS - 1][4], Actor.HUMAN.value)
        self.assertEqual(Board.from_matrix(snapshot), board)

    def test_given_grid_when_constructing_then_board_takes_private_copy(self):
        grid = np.zeros((ROWS, COLS), dtype=np.int8)
        board = Board(grid)
        grid[ROWS - 1, 0] = 1
        self.assertTrue(board.is_empty())

    def test_given_top_row_filled_when_checked_then_is_top_row_full(self):
        board = Board()
        self.assertFalse(board.is_top_row_full())
        for col in range(COLS):
            for _ in range(ROWS):
                board.drop(col, Actor.HUMAN if col % 2 else Actor.SERVER)
        self.assertTrue(board.is_top_row_full())
        self.assertEqual(board.legal_columns(), set())

    def test_given_board_when_rendered_then_symbols_and_column_numbers_shown(self):
        board = replay_columns([0, 1])
        text = board.render()
        self.assertIn("X", text)
        self.assertIn("O", text)
        self.assertTrue(text.splitlines()[-1].startswith("|0 1 2"))


if __name__ == "__main__":
    unittest.main()
