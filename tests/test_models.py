import sys
import os
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pydantic import ValidationError

from unchessful.models import EngineDescription, EngineDirectory, GameMoveRequest, GameMoveResponse


class TestModels(unittest.TestCase):
    def test_engine_directory(self):
        directory = EngineDirectory.model_validate({
            "engines": [
                {"engine_id": "random", "name": "Random", "entrypoint_url": "https://api.example/random/"},
            ],
            "motd": "hello",
        })
        self.assertEqual(directory.engines[0].engine_id, "random")
        # unknown fields are kept
        self.assertEqual(directory.model_extra, {"motd": "hello"})

    def test_engine_description(self):
        variant = {"name": "v1", "game_url": "https://api.example/random/v1/move"}
        desc = EngineDescription.model_validate({
            "name": "Random",
            "variants": [variant],
            "best_available_variant": variant,
        })
        self.assertEqual(desc.text_description, "")
        self.assertEqual(desc.best_available_variant, desc.variants[0])

    def test_missing_field(self):
        with self.assertRaises(ValidationError):
            EngineDirectory.model_validate({"engines": [{"name": "Random"}]})

    def test_move_request_checks_fen(self):
        fen = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
        self.assertEqual(GameMoveRequest(fen=fen + " ").model_dump(), {"fen": fen})
        with self.assertRaises(ValidationError):
            GameMoveRequest(fen="8/8/8 w")

    def test_timing_text(self):
        self.assertEqual(GameMoveResponse(move_san="e4").timing_text(), "")
        self.assertEqual(GameMoveResponse(move_san="e4", move_timing=0.25).timing_text(), "0.25")
        response = GameMoveResponse(move_san="e4", move_timing={"search": "10ms", "total": "12ms"})
        self.assertEqual(response.timing_text(), "search: 10ms, total: 12ms")


if __name__ == '__main__':
    unittest.main()
