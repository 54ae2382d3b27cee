"""Legal moves split into the four kinds the board UI has to tell apart.

python-chess describes every move as ``from_square``/``to_square``/``promotion``.
The board needs more than that: castling is shown on the king's landing square,
en passant is a capture onto an empty square, and a promotion cannot be played
until the player picks a piece. ``classify_move`` turns a legal ``chess.Move``
into exactly one of ``NormalMove``, ``EnPassantMove``, ``CastleMove`` or
``PromotionMove``.
"""
from dataclasses import dataclass
from typing import Iterator, Union

import chess


PROMOTION_ROLES = (chess.QUEEN, chess.ROOK, chess.BISHOP, chess.KNIGHT)


def color_name(color: chess.Color) -> str:
    return "White" if color == chess.WHITE else "Black"


@dataclass(frozen=True)
class LastMove:
    a: chess.Square
    b: chess.Square

    def __contains__(self, square: object) -> bool:
        return square == self.a or square == self.b

    def __iter__(self) -> Iterator[chess.Square]:
        yield self.a
        yield self.b


@dataclass(frozen=True)
class NormalMove:
    move: chess.Move
    is_capture: bool = False

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def destination(self) -> chess.Square:
        return self.move.to_square

    def highlight(self) -> LastMove:
        return LastMove(self.move.from_square, self.move.to_square)


@dataclass(frozen=True)
class EnPassantMove:
    move: chess.Move

    is_capture = True

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def destination(self) -> chess.Square:
        return self.move.to_square

    @property
    def captured_square(self) -> chess.Square:
        return chess.square(chess.square_file(self.move.to_square), chess.square_rank(self.move.from_square))

    def highlight(self) -> LastMove:
        return LastMove(self.move.from_square, self.move.to_square)


@dataclass(frozen=True)
class CastleMove:
    move: chess.Move
    color: chess.Color
    kingside: bool

    is_capture = False

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def destination(self) -> chess.Square:
        # Standard chess encodes castling as king-to-landing-square, chess960 as
        # king-takes-rook; both are shown on the king's landing square.
        return chess.square(6 if self.kingside else 2, self._back_rank)

    @property
    def rook_to(self) -> chess.Square:
        return chess.square(5 if self.kingside else 3, self._back_rank)

    @property
    def _back_rank(self) -> int:
        return 0 if self.color == chess.WHITE else 7

    def highlight(self) -> LastMove:
        return LastMove(self.move.from_square, self.rook_to)


@dataclass(frozen=True)
class PromotionMove:
    """A pawn reaching the last rank, still missing the piece it becomes."""

    from_square: chess.Square
    to_square: chess.Square
    is_capture: bool = False

    @property
    def destination(self) -> chess.Square:
        return self.to_square

    def with_role(self, role: chess.PieceType) -> chess.Move:
        if role not in PROMOTION_ROLES:
            raise ValueError(f"cannot promote to {chess.piece_name(role)}")
        return chess.Move(self.from_square, self.to_square, promotion=role)

    def highlight(self) -> LastMove:
        return LastMove(self.from_square, self.to_square)


MoveKind = Union[NormalMove, EnPassantMove, CastleMove, PromotionMove]


def classify_move(board: chess.Board, move: chess.Move) -> MoveKind:
    """Return the kind of ``move``, which must be legal in ``board``."""
    if move.promotion is not None:
        return PromotionMove(move.from_square, move.to_square, board.is_capture(move))
    if board.is_en_passant(move):
        return EnPassantMove(move)
    if board.is_castling(move):
        return CastleMove(move, board.turn, board.is_kingside_castling(move))
    return NormalMove(move, board.is_capture(move))
