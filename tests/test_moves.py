import sys
import os
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import chess

from unchessful.moves import (
    CastleMove,
    EnPassantMove,
    LastMove,
    NormalMove,
    PromotionMove,
    classify_move,
)


class TestClassifyMove(unittest.TestCase):
    def test_quiet_pawn_push(self):
        board = chess.Board()
        kind = classify_move(board, chess.Move.from_uci("e2e4"))
        self.assertIsInstance(kind, NormalMove)
        self.assertFalse(kind.is_capture)
        self.assertEqual(kind.destination, chess.E4)

    def test_capture(self):
        board = chess.Board()
        for uci in ("e2e4", "d7d5"):
            board.push_uci(uci)
        kind = classify_move(board, chess.Move.from_uci("e4d5"))
        self.assertIsInstance(kind, NormalMove)
        self.assertTrue(kind.is_capture)

    def test_en_passant(self):
        board = chess.Board("rnbqkbnr/1pp1pppp/p7/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3")
        kind = classify_move(board, chess.Move.from_uci("e5d6"))
        self.assertIsInstance(kind, EnPassantMove)
        self.assertTrue(kind.is_capture)
        self.assertEqual(kind.captured_square, chess.D5)

    def test_castling_lands_on_king_square(self):
        board = chess.Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        kingside = classify_move(board, chess.Move.from_uci("e1g1"))
        queenside = classify_move(board, chess.Move.from_uci("e1c1"))
        self.assertIsInstance(kingside, CastleMove)
        self.assertEqual(kingside.destination, chess.G1)
        self.assertEqual(kingside.highlight(), LastMove(chess.E1, chess.F1))
        self.assertEqual(queenside.destination, chess.C1)
        self.assertEqual(queenside.highlight(), LastMove(chess.E1, chess.D1))

    def test_black_castling(self):
        board = chess.Board("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
        kind = classify_move(board, chess.Move.from_uci("e8g8"))
        self.assertEqual(kind.destination, chess.G8)
        self.assertEqual(kind.rook_to, chess.F8)

    def test_promotion_needs_a_role(self):
        board = chess.Board("1n6/P7/8/8/8/8/8/k6K w - - 0 1")
        kind = classify_move(board, chess.Move.from_uci("a7b8q"))
        self.assertIsInstance(kind, PromotionMove)
        self.assertTrue(kind.is_capture)
        self.assertEqual(kind.with_role(chess.KNIGHT), chess.Move(chess.A7, chess.B8, promotion=chess.KNIGHT))
        with self.assertRaises(ValueError):
            kind.with_role(chess.KING)

    def test_last_move_membership(self):
        last = LastMove(chess.E2, chess.E4)
        self.assertIn(chess.E2, last)
        self.assertIn(chess.E4, last)
        self.assertNotIn(chess.E3, last)
        self.assertEqual(list(last), [chess.E2, chess.E4])


if __name__ == '__main__':
    unittest.main()
