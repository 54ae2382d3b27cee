import logging
from typing import Dict, Optional, Tuple
from pathlib import Path
import pygame
import chess
from .. import config
from ..game_logic import ChessGame, PieceSelection
from ..moves import LastMove

log = logging.getLogger(__name__)

Rgb = Tuple[int, int, int]

SELECTED = (74, 185, 219)
MOVE_TARGET = (144, 238, 144)
ATTACK_TARGET = (255, 128, 128)
LAST_MOVE = (240, 230, 140)
LABEL_COLOR = (200, 200, 200)

# Multiplied into the piece image; white leaves it unchanged.
NO_TINT = (255, 255, 255)
IN_CHECK_TINT = (255, 90, 90)
CHECKER_TINT = (255, 200, 90)
CHECKMATED_TINT = (120, 120, 120)

THEMES: Dict[str, Tuple[Rgb, Rgb]] = {
    "Classic": ((244, 197, 151), (200, 133, 69)),
    "Brown": ((240, 217, 181), (181, 136, 99)),
    "Green": ((238, 238, 210), (118, 150, 86)),
    "Blue": ((232, 235, 239), (125, 135, 150)),
}

FILES = "abcdefgh"


def is_dark(square: chess.Square) -> bool:
    return bool(chess.BB_DARK_SQUARES & chess.BB_SQUARES[square])


def square_color(
    square: chess.Square,
    last_move: Optional[LastMove],
    selection: Optional[PieceSelection],
    theme: Tuple[Rgb, Rgb] = THEMES["Classic"],
) -> Rgb:
    light, dark = theme
    if last_move is not None and square in last_move:
        color = LAST_MOVE
    elif is_dark(square):
        color = dark
    else:
        color = light
    if selection is not None:
        if square == selection.square:
            color = SELECTED
        else:
            kind = selection.move_to(square)
            if kind is not None:
                color = ATTACK_TARGET if kind.is_capture else MOVE_TARGET
    return color


def piece_tint(board: chess.Board, square: chess.Square) -> Rgb:
    piece = board.piece_at(square)
    if piece is None:
        return NO_TINT
    if piece.piece_type == chess.KING:
        if board.is_attacked_by(not piece.color, square):
            if board.is_checkmate() and piece.color == board.turn:
                return CHECKMATED_TINT
            return IN_CHECK_TINT
        return NO_TINT
    if square in board.checkers():
        return CHECKER_TINT
    return NO_TINT


def cell_to_square(row: int, col: int, orientation: chess.Color) -> Optional[chess.Square]:
    """Map a cell of the 10x10 labelled grid to a board square, or None for the frame."""
    if not (1 <= row <= 8 and 1 <= col <= 8):
        return None
    if orientation == chess.WHITE:
        return chess.square(col - 1, 8 - row)
    return chess.square(8 - col, row - 1)


def square_to_cell(square: chess.Square, orientation: chess.Color) -> Tuple[int, int]:
    file = chess.square_file(square)
    rank = chess.square_rank(square)
    if orientation == chess.WHITE:
        return 8 - rank, file + 1
    return rank + 1, 8 - file


def frame_label(row: int, col: int, orientation: chess.Color) -> str:
    """Text of a frame cell: file letters on top and bottom, ranks on the sides."""
    corner = row in (0, 9) and col in (0, 9)
    if corner:
        return ""
    if row in (0, 9):
        file = col - 1 if orientation == chess.WHITE else 8 - col
        return FILES[file]
    if col in (0, 9):
        rank = 8 - row if orientation == chess.WHITE else row - 1
        return str(rank + 1)
    return ""


def fit_square_size(width: int, height: int) -> int:
    return int(min(min(width, height) / 10, config.MAX_SQUARE_SIZE))


class PieceImages:
    def __init__(self) -> None:
        self.images: Dict[str, pygame.Surface] = {}
        self.letters: Dict[str, pygame.Surface] = {}
        self.size = 0

    def load(self, base_path: Path, size: int) -> None:
        self.images.clear()
        self.letters.clear()
        self.size = size
        try:
            font = pygame.font.SysFont("arial", int(size * 0.55), bold=True)
        except Exception:
            font = None
        for color in chess.COLORS:
            for piece_type in chess.PIECE_TYPES:
                piece = chess.Piece(piece_type, color)
                key = self.key_for_piece(piece)
                if font is not None:
                    self.letters[key] = self._letter_surface(piece, font, size)
                path = base_path / f"{key}.png"
                if path.is_file():
                    try:
                        image = pygame.image.load(str(path)).convert_alpha()
                        self.images[key] = pygame.transform.smoothscale(image, (size, size))
                    except pygame.error as e:
                        log.warning("Could not load %s: %s", path, e)

    def _letter_surface(self, piece: chess.Piece, font: pygame.font.Font, size: int) -> pygame.Surface:
        surface = pygame.Surface((size, size), pygame.SRCALPHA)
        disc, ink = ((250, 250, 250), (20, 20, 20)) if piece.color == chess.WHITE else ((30, 30, 30), (235, 235, 235))
        center = (size // 2, size // 2)
        pygame.draw.circle(surface, disc, center, int(size * 0.38))
        pygame.draw.circle(surface, ink, center, int(size * 0.38), 2)
        text = font.render(piece.symbol().upper(), True, ink)
        surface.blit(text, text.get_rect(center=center))
        return surface

    def key_for_piece(self, piece: chess.Piece) -> str:
        color = "white" if piece.color == chess.WHITE else "black"
        return f"{color}_{chess.piece_name(piece.piece_type)}"

    def get(self, piece: chess.Piece, tint: Rgb = NO_TINT) -> Optional[pygame.Surface]:
        key = self.key_for_piece(piece)
        image = self.images.get(key) or self.letters.get(key)
        if image is None or tint == NO_TINT:
            return image
        tinted = image.copy()
        tinted.fill(tint + (255,), special_flags=pygame.BLEND_RGBA_MULT)
        return tinted


class BoardRenderer:
    def __init__(self, top_left: Tuple[int, int], square_size: int = config.MAX_SQUARE_SIZE) -> None:
        self.offset_x, self.offset_y = top_left
        self.square_size = square_size
        self.piece_images = PieceImages()
        self.pieces_dir = Path(__file__).resolve().parent / "assets" / "pieces"
        self.orientation: chess.Color = chess.WHITE
        self.theme_name = "Classic"
        self.label_font: Optional[pygame.font.Font] = None
        self.square_cache: Dict[Tuple[Rgb, int], pygame.Surface] = {}

    @property
    def theme(self) -> Tuple[Rgb, Rgb]:
        return THEMES[self.theme_name]

    def set_theme(self, theme_name: str) -> None:
        if theme_name in THEMES:
            self.theme_name = theme_name

    def load(self) -> None:
        self.piece_images.load(self.pieces_dir, self.square_size)
        self.label_font = pygame.font.SysFont("arial", max(12, self.square_size // 4))
        self.square_cache.clear()

    def layout(self, top_left: Tuple[int, int], square_size: int) -> None:
        self.offset_x, self.offset_y = top_left
        if square_size != self.square_size:
            self.square_size = square_size
            self.load()

    def board_rect(self) -> pygame.Rect:
        return pygame.Rect(self.offset_x, self.offset_y, self.square_size * 10, self.square_size * 10)

    def cell_rect(self, row: int, col: int) -> pygame.Rect:
        return pygame.Rect(
            self.offset_x + col * self.square_size,
            self.offset_y + row * self.square_size,
            self.square_size,
            self.square_size,
        )

    def square_to_rect(self, square: chess.Square) -> pygame.Rect:
        return self.cell_rect(*square_to_cell(square, self.orientation))

    def pixel_to_square(self, x: int, y: int) -> Optional[chess.Square]:
        x_rel = x - self.offset_x
        y_rel = y - self.offset_y
        if x_rel < 0 or y_rel < 0:
            return None
        return cell_to_square(y_rel // self.square_size, x_rel // self.square_size, self.orientation)

    def _square_surface(self, color: Rgb) -> pygame.Surface:
        key = (color, self.square_size)
        surface = self.square_cache.get(key)
        if surface is None:
            surface = pygame.Surface((self.square_size, self.square_size))
            surface.fill(color)
            self.square_cache[key] = surface
        return surface

    def draw_board(self, surface: pygame.Surface, game: ChessGame) -> None:
        board = game.board
        for square in chess.SQUARES:
            rect = self.square_to_rect(square)
            color = square_color(square, game.last_move, game.selection, self.theme)
            surface.blit(self._square_surface(color), rect)
            piece = board.piece_at(square)
            if piece is None:
                continue
            image = self.piece_images.get(piece, piece_tint(board, square))
            if image is not None:
                surface.blit(image, image.get_rect(center=rect.center))
        if not game.game_is_going:
            # disabled look
            shade = pygame.Surface((self.square_size * 8, self.square_size * 8), pygame.SRCALPHA)
            shade.fill((0, 0, 0, 60))
            surface.blit(shade, (self.offset_x + self.square_size, self.offset_y + self.square_size))
        self.draw_labels(surface)

    def draw_labels(self, surface: pygame.Surface) -> None:
        if self.label_font is None:
            return
        for row in range(10):
            for col in range(10):
                text = frame_label(row, col, self.orientation)
                if not text:
                    continue
                label = self.label_font.render(text, True, LABEL_COLOR)
                surface.blit(label, label.get_rect(center=self.cell_rect(row, col).center))
