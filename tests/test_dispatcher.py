import sys
import os
import threading
import time
import unittest
from unittest.mock import MagicMock

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from unchessful.engine.client import EngineClient
from unchessful.engine.dispatcher import Reply, RequestDispatcher, RequestResult
from unchessful.errors import DispatcherClosed, RequestFailed
from unchessful.models import EngineDirectory, EngineRef, EngineVariant, GameMoveResponse

ENGINE = EngineRef(engine_id="random", name="Random", entrypoint_url="https://api.example/random/")
VARIANT = EngineVariant(name="v1", game_url="https://api.example/random/v1/move")
FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class TestReply(unittest.TestCase):
    def test_empty_until_sent(self):
        reply = Reply()
        self.assertIsNone(reply.try_take())
        reply.send(RequestResult(value=1))
        self.assertEqual(reply.try_take().value, 1)

    def test_single_use(self):
        reply = Reply()
        reply.send(RequestResult(value=1))
        with self.assertRaises(RuntimeError):
            reply.send(RequestResult(value=2))
        reply.wait(timeout=1)
        with self.assertRaises(RuntimeError):
            reply.try_take()


class TestRequestDispatcher(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock(spec=EngineClient)
        self.dispatcher = RequestDispatcher(self.client)

    def tearDown(self):
        self.dispatcher.close(timeout=2)

    def test_requests_served_in_order(self):
        calls = []
        self.client.get_engines.side_effect = lambda: calls.append("engines") or EngineDirectory(engines=[ENGINE])
        self.client.get_engine_description.side_effect = lambda ref: calls.append("description")
        self.client.get_position_evaluation.side_effect = (
            lambda variant, fen: calls.append("move") or GameMoveResponse(move_san="e4")
        )

        # queued before the worker starts, so order cannot depend on timing
        replies = [
            self.dispatcher.fetch_engines(),
            self.dispatcher.fetch_engine_description(ENGINE),
            self.dispatcher.fetch_move(VARIANT, FEN),
        ]
        self.dispatcher.start()
        results = [reply.wait(timeout=5) for reply in replies]

        self.assertEqual(calls, ["engines", "description", "move"])
        self.assertEqual(results[0].value.engines, [ENGINE])
        self.assertEqual(results[2].value.move_san, "e4")
        self.client.get_position_evaluation.assert_called_once_with(VARIANT, FEN)

    def test_error_is_delivered_and_worker_continues(self):
        self.client.get_engines.side_effect = [RequestFailed("https://api.example/", "timed out"), EngineDirectory(engines=[])]
        self.dispatcher.start()

        first = self.dispatcher.fetch_engines().wait(timeout=5)
        self.assertFalse(first.ok)
        self.assertIsInstance(first.error, RequestFailed)

        second = self.dispatcher.fetch_engines().wait(timeout=5)
        self.assertTrue(second.ok)
        self.assertEqual(second.value.engines, [])
        self.assertTrue(self.dispatcher.is_running)

    def test_submit_does_not_block(self):
        release = threading.Event()
        self.client.get_engines.side_effect = lambda: release.wait(5) and EngineDirectory(engines=[])
        self.dispatcher.start()
        reply = self.dispatcher.fetch_engines()
        self.assertIsNone(reply.try_take())
        release.set()
        self.assertTrue(reply.wait(timeout=5).ok)

    def test_close_waits_for_call_before_closing_client(self):
        release = threading.Event()
        started = threading.Event()

        def slow_engines():
            started.set()
            release.wait(5)
            return EngineDirectory(engines=[])

        self.client.get_engines.side_effect = slow_engines
        self.dispatcher.start()
        reply = self.dispatcher.fetch_engines()
        self.assertTrue(started.wait(5))

        with self.assertLogs("unchessful.engine.dispatcher", level="WARNING"):
            self.dispatcher.close(timeout=0.05)
        self.client.close.assert_not_called()

        release.set()
        self.assertTrue(reply.wait(timeout=5).ok)
        deadline = time.monotonic() + 5
        while self.dispatcher.is_running and time.monotonic() < deadline:
            time.sleep(0.01)
        self.assertFalse(self.dispatcher.is_running)
        self.client.close.assert_called_once()

    def test_close_before_start(self):
        self.dispatcher.close()
        self.client.close.assert_called_once()

    def test_close(self):
        self.dispatcher.start()
        self.dispatcher.close(timeout=2)
        self.assertFalse(self.dispatcher.is_running)
        self.client.close.assert_called_once()
        with self.assertRaises(DispatcherClosed):
            self.dispatcher.fetch_engines()


if __name__ == '__main__':
    unittest.main()
