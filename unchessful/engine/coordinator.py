import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import chess

from ..errors import InvalidEngineMove
from ..models import EngineVariant, GameMoveResponse
from .dispatcher import Reply, RequestDispatcher

log = logging.getLogger(__name__)


class RemoteMoveStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"
    ERROR = "error"


@dataclass(frozen=True)
class RemoteMoveResult:
    status: RemoteMoveStatus
    move: Optional[chess.Move] = None
    response: Optional[GameMoveResponse] = None
    error: Optional[Exception] = None


class RemoteMoveCoordinator:
    """Fetches the engine's move for the current position, one request at a time.

    ``tick`` is called once per frame while the engine is to move. It either
    issues a request, reports that one is still in flight, hands back the
    decoded move, or reports the error that ended the last attempt. After an
    error nothing is sent again until ``retry`` is called.
    """

    def __init__(self, dispatcher: RequestDispatcher, variant: EngineVariant) -> None:
        self.dispatcher = dispatcher
        self.variant = variant
        self.pending: Optional[Reply[GameMoveResponse]] = None
        self.error: Optional[Exception] = None
        self.requested_fen: Optional[str] = None

    @property
    def status(self) -> RemoteMoveStatus:
        if self.error is not None:
            return RemoteMoveStatus.ERROR
        if self.pending is not None:
            return RemoteMoveStatus.PENDING
        return RemoteMoveStatus.IDLE

    def tick(self, board: chess.Board) -> RemoteMoveResult:
        if self.error is not None:
            return RemoteMoveResult(RemoteMoveStatus.ERROR, error=self.error)
        if self.pending is None:
            self.requested_fen = board.fen(en_passant="legal")
            self.pending = self.dispatcher.fetch_move(self.variant, self.requested_fen)
            return RemoteMoveResult(RemoteMoveStatus.PENDING)

        result = self.pending.try_take()
        if result is None:
            return RemoteMoveResult(RemoteMoveStatus.PENDING)
        self.pending = None

        if not result.ok:
            return self._fail(result.error)
        response = result.value
        try:
            move = board.parse_san(response.move_san)
        except ValueError as e:
            return self._fail(InvalidEngineMove(response.move_san, board.fen(), e))
        if not move or move not in board.legal_moves:
            # parse_san also accepts null-move tokens such as "--"
            return self._fail(InvalidEngineMove(response.move_san, board.fen()))
        return RemoteMoveResult(RemoteMoveStatus.SETTLED, move=move, response=response)

    def retry(self) -> None:
        self.error = None

    def cancel(self) -> None:
        # The in-flight call still completes on the dispatcher; its reply is dropped.
        self.pending = None
        self.error = None
        self.requested_fen = None

    def _fail(self, error: Exception) -> RemoteMoveResult:
        log.warning("Engine move from %s failed: %s", self.variant.game_url, error)
        self.error = error
        return RemoteMoveResult(RemoteMoveStatus.ERROR, error=error)
