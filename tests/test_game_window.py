import sys
import os
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# headless window
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import chess
import pygame

from unchessful.engine.dispatcher import Reply, RequestResult
from unchessful.errors import RequestFailed
from unchessful.gui.game_window import GameWindow
from unchessful.models import EngineDescription, EngineDirectory, EngineRef, EngineVariant, GameMoveResponse

ENGINE = EngineRef(engine_id="random", name="Random", entrypoint_url="https://api.example/random/")
FAST = EngineVariant(name="fast", game_url="https://api.example/random/fast/move")
STRONG = EngineVariant(name="strong", game_url="https://api.example/random/strong/move")
DESCRIPTION = EngineDescription(
    name="Random",
    text_description="Picks a random legal move.",
    variants=[FAST, STRONG],
    best_available_variant=STRONG,
)


class FakeDispatcher:
    def __init__(self):
        self.sent = []

    def start(self):
        return self

    def close(self, timeout=None):
        pass

    def _submit(self, *request):
        reply = Reply()
        self.sent.append(request + (reply,))
        return reply

    def fetch_engines(self):
        return self._submit("engines")

    def fetch_engine_description(self, engine_ref):
        return self._submit("description", engine_ref)

    def fetch_move(self, variant, fen):
        return self._submit("move", variant, fen)

    def answer(self, result):
        self.sent[-1][-1].send(result)


class TestGameWindow(unittest.TestCase):
    def setUp(self):
        self.dispatcher = FakeDispatcher()
        self.window = GameWindow(self.dispatcher)
        self.addCleanup(pygame.quit)

    def load_engines(self):
        self.dispatcher.answer(RequestResult(value=EngineDirectory(engines=[ENGINE])))
        self.window.update()
        self.window.fetch_engine_description()
        self.dispatcher.answer(RequestResult(value=DESCRIPTION))
        self.window.update()

    def click(self, square):
        self.window.handle_mouse_down(self.window.board_renderer.square_to_rect(square).center)

    def test_engine_list_requested_on_start(self):
        self.assertEqual(self.dispatcher.sent[0][0], "engines")
        self.assertIsNone(self.window.engine_selector.selected)

    def test_variant_defaults_to_best_available(self):
        self.load_engines()
        self.assertEqual(self.window.engine_selector.selected, ENGINE)
        self.assertEqual(self.dispatcher.sent[1][:2], ("description", ENGINE))
        self.assertEqual(self.window.variant_selector.selected, STRONG)

    def test_best_variant_missing_from_list_is_offered(self):
        self.dispatcher.answer(RequestResult(value=EngineDirectory(engines=[ENGINE])))
        self.window.update()
        self.window.fetch_engine_description()
        desc = EngineDescription(name="Random", variants=[FAST], best_available_variant=STRONG)
        self.dispatcher.answer(RequestResult(value=desc))
        self.window.update()
        self.assertEqual(self.window.variant_selector.selected, STRONG)
        self.assertEqual(self.window.variant_selector.options, [STRONG, FAST])

    def test_new_game_keeps_engine_variant(self):
        self.load_engines()
        self.window.start_engine_game(chess.BLACK)
        self.window.variant_selector.next()
        self.window.new_game()
        mode = self.window.game.game_mode
        self.assertEqual(mode.variant, STRONG)
        self.assertIs(mode.variant, mode.coordinator.variant)
        self.assertEqual(self.window.game.player_color, chess.BLACK)

    def test_engine_list_error_is_shown(self):
        self.dispatcher.answer(RequestResult(error=RequestFailed("https://api.example/", "timed out")))
        self.window.update()
        self.assertIn("timed out", self.window.engine_data.error)

    def test_engine_plays_white(self):
        self.load_engines()
        self.window.start_engine_game(chess.BLACK)
        self.assertEqual(self.window.board_renderer.orientation, chess.BLACK)

        self.window.update()
        kind, variant, fen, _ = self.dispatcher.sent[-1]
        self.assertEqual((kind, variant, fen), ("move", STRONG, chess.STARTING_FEN))
        self.assertTrue(self.window.game.is_waiting_for_ai_move())

        self.dispatcher.answer(RequestResult(value=GameMoveResponse(move_san="e4")))
        self.window.update()
        self.assertEqual(self.window.game.move_log, ["e4"])
        self.assertEqual(self.window.game.last_ai_move_info().move_san, "e4")

    def test_engine_error_and_retry(self):
        self.load_engines()
        self.window.start_engine_game(chess.BLACK)
        self.window.update()
        self.dispatcher.answer(RequestResult(error=RequestFailed(STRONG.game_url, "502")))
        self.window.update()
        self.assertIsNotNone(self.window.game.ai_move_error())
        requests_before = len(self.dispatcher.sent)

        self.window.update()
        self.assertEqual(len(self.dispatcher.sent), requests_before)

        self.window.retry_engine_move()
        self.window.update()
        self.assertEqual(len(self.dispatcher.sent), requests_before + 1)

    def test_self_play_to_checkmate(self):
        self.window.start_self_play()
        for origin, target in ((chess.F2, chess.F3), (chess.E7, chess.E5), (chess.G2, chess.G4), (chess.D8, chess.H4)):
            self.click(origin)
            self.click(target)
        self.window.update()
        dialog = self.window.game_over_dialog
        self.assertIsNotNone(dialog)
        self.assertIn("Black wins", dialog.title)
        self.assertEqual(dialog.subtitle, "White to move and is in checkmate")

        self.window.handle_mouse_down(dialog.dismiss_rect.center)
        self.assertIsNone(self.window.game_over_dialog)
        self.window.update()
        self.assertIsNone(self.window.game_over_dialog)

    def test_promotion_dialog(self):
        self.window.start_self_play()
        self.window.game.board = chess.Board("8/P7/8/8/8/8/8/k6K w - - 0 1")
        self.click(chess.A7)
        self.click(chess.A8)
        dialog = self.window.promotion_dialog
        self.assertIsNotNone(dialog)
        self.window.handle_mouse_down(dialog.option_rects[0].center)
        self.assertIsNone(self.window.promotion_dialog)
        self.assertEqual(self.window.game.board.piece_at(chess.A8), chess.Piece(chess.QUEEN, chess.WHITE))

    def test_draw_every_panel_state(self):
        self.window.draw()
        self.load_engines()
        self.window.start_self_play()
        self.click(chess.E2)
        self.window.toggle_dark_mode()
        self.window.cycle_theme()
        self.window.draw()
        self.assertEqual(self.window.board_renderer.theme_name, "Brown")


if __name__ == '__main__':
    unittest.main()
