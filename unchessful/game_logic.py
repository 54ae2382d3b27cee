import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

import chess

from .engine.coordinator import RemoteMoveCoordinator, RemoteMoveStatus
from .models import EngineVariant, GameMoveResponse
from .moves import EnPassantMove, LastMove, MoveKind, PromotionMove, classify_move, color_name

log = logging.getLogger(__name__)


# --- GAME MODES ---
@dataclass
class HumanVsHuman:
    pass


@dataclass
class HumanVsEngine:
    coordinator: RemoteMoveCoordinator

    @property
    def variant(self) -> EngineVariant:
        return self.coordinator.variant


GameMode = Union[HumanVsHuman, HumanVsEngine]


# --- TERMINATIONS ---
@dataclass(frozen=True)
class Checkmate:
    """``color`` is to move and is checkmated; the other side wins."""

    color: chess.Color

    def outcome(self) -> chess.Outcome:
        return chess.Outcome(chess.Termination.CHECKMATE, not self.color)


@dataclass(frozen=True)
class Stalemate:
    color: chess.Color

    def outcome(self) -> chess.Outcome:
        return chess.Outcome(chess.Termination.STALEMATE, None)


@dataclass(frozen=True)
class InsufficientMaterial:
    def outcome(self) -> chess.Outcome:
        return chess.Outcome(chess.Termination.INSUFFICIENT_MATERIAL, None)


@dataclass(frozen=True)
class Other:
    """Any other end of game python-chess reports, e.g. the seventy-five-move rule."""

    result: chess.Outcome

    def outcome(self) -> chess.Outcome:
        return self.result


Termination = Union[Checkmate, Stalemate, InsufficientMaterial, Other]


# --- INTERACTION STATE ---
@dataclass
class PieceSelection:
    piece: chess.Piece
    square: chess.Square
    legal_moves: List[Tuple[chess.Square, MoveKind]] = field(default_factory=list)

    @classmethod
    def for_square(cls, board: chess.Board, square: chess.Square) -> "PieceSelection":
        piece = board.piece_at(square)
        if piece is None:
            raise ValueError(f"no piece on {chess.square_name(square)}")
        targets: List[Tuple[chess.Square, MoveKind]] = []
        seen_promotions = set()
        for move in board.legal_moves:
            if move.from_square != square or board.piece_type_at(move.from_square) != piece.piece_type:
                continue
            kind = classify_move(board, move)
            if isinstance(kind, PromotionMove):
                # one entry per destination; the role is chosen afterwards
                if kind.destination in seen_promotions:
                    continue
                seen_promotions.add(kind.destination)
            targets.append((kind.destination, kind))
        return cls(piece, square, targets)

    def move_to(self, square: chess.Square) -> Optional[MoveKind]:
        for destination, kind in self.legal_moves:
            if destination == square:
                return kind
        return None

    def can_move_to(self, square: chess.Square) -> bool:
        return self.move_to(square) is not None

    @property
    def destinations(self) -> List[chess.Square]:
        return [destination for destination, _ in self.legal_moves]


@dataclass
class PromotionPrompt:
    color: chess.Color
    move: PromotionMove
    anchor: Tuple[int, int] = (0, 0)


class ClickResult(Enum):
    IGNORED = "ignored"
    SELECTED = "selected"
    DESELECTED = "deselected"
    MOVED = "moved"
    PROMOTION_PENDING = "promotion_pending"


class ChessGame:
    """Board interaction for one game: selection, moves, promotion, engine turns.

    All rules questions go to the ``chess.Board``. A move is only ever played
    from the current selection's precomputed legal list, or from the engine's
    SAN after python-chess has parsed it against the same board.
    """

    def __init__(
        self,
        player_color: chess.Color = chess.WHITE,
        game_mode: Optional[GameMode] = None,
        board: Optional[chess.Board] = None,
    ) -> None:
        self.board = board if board is not None else chess.Board()
        self.player_color = player_color
        self.game_mode: GameMode = game_mode if game_mode is not None else HumanVsHuman()
        self.selection: Optional[PieceSelection] = None
        self.last_move: Optional[LastMove] = None
        self.last_ai_move: Optional[GameMoveResponse] = None
        self.promotion: Optional[PromotionPrompt] = None
        self.move_log: List[str] = []
        self.game_is_going = False
        self.game_over_is_dismissed = False

    # --- lifecycle ---
    def start_game(self) -> None:
        self.board = chess.Board()
        self.selection = None
        self.last_move = None
        self.last_ai_move = None
        self.promotion = None
        self.move_log = []
        self.game_is_going = True
        self.game_over_is_dismissed = False
        if isinstance(self.game_mode, HumanVsEngine):
            self.game_mode.coordinator.cancel()

    def stop_game(self) -> None:
        self.promotion = None
        self.game_is_going = False
        if isinstance(self.game_mode, HumanVsEngine):
            self.game_mode.coordinator.cancel()

    def dismiss_game_over(self) -> None:
        self.game_over_is_dismissed = True

    @property
    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    @property
    def is_vs_engine(self) -> bool:
        return isinstance(self.game_mode, HumanVsEngine)

    def is_players_turn(self) -> bool:
        return not self.is_vs_engine or self.board.turn == self.player_color

    def may_move(self, color: chess.Color) -> bool:
        return self.board.turn == color and (color == self.player_color or not self.is_vs_engine)

    # --- clicks ---
    def click(self, square: chess.Square, anchor: Tuple[int, int] = (0, 0)) -> ClickResult:
        if not self.game_is_going or self.promotion is not None:
            return ClickResult.IGNORED
        piece = self.board.piece_at(square)
        if piece is not None and self.may_move(piece.color):
            self.select_piece(square)
            return ClickResult.SELECTED
        if self.selection is not None and self.selection.can_move_to(square):
            return self.attempt_move(square, anchor)
        if self.selection is not None:
            self.deselect()
            return ClickResult.DESELECTED
        return ClickResult.IGNORED

    def select_piece(self, square: chess.Square) -> Optional[PieceSelection]:
        if not self.game_is_going or self.promotion is not None:
            return None
        piece = self.board.piece_at(square)
        if piece is None or not self.may_move(piece.color):
            return None
        self.selection = PieceSelection.for_square(self.board, square)
        return self.selection

    def attempt_move(self, square: chess.Square, anchor: Tuple[int, int] = (0, 0)) -> ClickResult:
        if self.selection is None or self.promotion is not None:
            return ClickResult.IGNORED
        kind = self.selection.move_to(square)
        if kind is None:
            return ClickResult.IGNORED
        if isinstance(kind, PromotionMove):
            self.promotion = PromotionPrompt(self.selection.piece.color, kind, anchor)
            return ClickResult.PROMOTION_PENDING
        self.play_move(kind.move)
        return ClickResult.MOVED

    def choose_promotion_role(self, role: chess.PieceType) -> bool:
        if self.promotion is None:
            return False
        move = self.promotion.move.with_role(role)
        self.promotion = None
        self.play_move(move)
        return True

    def cancel_promotion(self) -> None:
        self.promotion = None

    def deselect(self) -> None:
        self.selection = None

    # --- moves ---
    def play_move(self, move: chess.Move) -> None:
        kind = classify_move(self.board, move)
        self.move_log.append(self.board.san(move))
        if isinstance(kind, EnPassantMove):
            log.warning("Holy hell! %s takes en passant", color_name(self.board.turn))
        # push() does not re-check legality; the move came from legal_moves or parse_san
        self.board.push(move)
        log.debug("Move played: %s", move.uci())
        self.last_move = kind.highlight()
        self.selection = None

        if self.board.is_game_over():
            self.game_is_going = False
            log.info("Game over: %s", self.why_game_not_running())

    # --- engine turns ---
    def is_waiting_for_ai_move(self) -> bool:
        if isinstance(self.game_mode, HumanVsEngine):
            return self.game_mode.coordinator.status is RemoteMoveStatus.PENDING
        return False

    def ai_move_error(self) -> Optional[Exception]:
        if isinstance(self.game_mode, HumanVsEngine):
            return self.game_mode.coordinator.error
        return None

    def retry_ai_move(self) -> None:
        if isinstance(self.game_mode, HumanVsEngine):
            self.game_mode.coordinator.retry()

    def last_ai_move_info(self) -> Optional[GameMoveResponse]:
        return self.last_ai_move

    def update_ai_move(self) -> RemoteMoveStatus:
        if not isinstance(self.game_mode, HumanVsEngine):
            return RemoteMoveStatus.IDLE
        if self.board.turn == self.player_color or not self.game_is_going:
            return RemoteMoveStatus.IDLE
        result = self.game_mode.coordinator.tick(self.board)
        if result.status is RemoteMoveStatus.SETTLED:
            self.play_move(result.move)
            self.last_ai_move = result.response
        return result.status

    # --- status ---
    def termination(self) -> Optional[Termination]:
        if self.board.is_insufficient_material():
            return InsufficientMaterial()
        if self.board.is_checkmate():
            return Checkmate(self.board.turn)
        if self.board.is_stalemate():
            return Stalemate(self.board.turn)
        outcome = self.board.outcome()
        if outcome is None:
            return None
        return Other(outcome)

    def why_game_not_running(self) -> str:
        side = color_name(self.board.turn)
        if self.board.is_insufficient_material():
            return "Draw due to insufficient material"
        if self.board.is_stalemate():
            return f"{side} to move and is stalemated"
        if self.board.is_checkmate():
            return f"{side} to move and is in checkmate"
        if self.board.is_game_over():
            return f"{side} to move, but game is over"
        return "The game has not been started yet, please check the menu."

    def status_text(self) -> str:
        if self.game_is_going:
            if self.board.is_check():
                return f"{color_name(self.board.turn)} to move, in check"
            return f"{color_name(self.board.turn)} to move"
        return self.why_game_not_running()
