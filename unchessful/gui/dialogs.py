from typing import Callable, List, Optional, Tuple
import pygame
import chess
from ..moves import PROMOTION_ROLES
from .chess_board_ui import PieceImages


class PromotionDialog:
    def __init__(
        self,
        anchor: Tuple[int, int],
        square_size: int,
        on_choice: Callable[[chess.PieceType], None],
        piece_images: PieceImages,
        color: chess.Color,
    ) -> None:
        self.on_choice = on_choice
        self.piece_images = piece_images
        self.color = color
        self.options = list(PROMOTION_ROLES)
        self.option_rects: List[pygame.Rect] = []
        width = square_size * len(self.options)
        self.rect = pygame.Rect(0, 0, width + 20, square_size + 20)
        self.rect.center = anchor

    def layout(self, bounds: pygame.Rect) -> None:
        self.rect.clamp_ip(bounds)
        self.option_rects.clear()
        width = (self.rect.width - 20) // len(self.options)
        for i, _ in enumerate(self.options):
            x = self.rect.x + 10 + i * width
            self.option_rects.append(pygame.Rect(x, self.rect.y + 10, width, self.rect.height - 20))

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(surface, (40, 40, 40), self.rect, border_radius=6)
        pygame.draw.rect(surface, (200, 200, 200), self.rect, 2, border_radius=6)

        for role, rect in zip(self.options, self.option_rects):
            img = self.piece_images.get(chess.Piece(role, self.color))
            if img:
                if img.get_height() > rect.height:
                    scale = rect.height / img.get_height()
                    img = pygame.transform.smoothscale(img, (int(img.get_width() * scale), int(img.get_height() * scale)))
                surface.blit(img, img.get_rect(center=rect.center))
            else:
                text = font.render(chess.piece_symbol(role).upper(), True, (230, 230, 230))
                surface.blit(text, text.get_rect(center=rect.center))

    def handle_mouse_down(self, pos) -> bool:
        for role, rect in zip(self.options, self.option_rects):
            if rect.collidepoint(pos):
                self.on_choice(role)
                return True
        return False


class MessageOverlay:
    """Banner across the bottom of the board area that fades out after a number of frames."""

    INFO_BACKGROUND = (0, 0, 0)
    ERROR_BACKGROUND = (150, 30, 30)

    def __init__(self, rect: pygame.Rect) -> None:
        self.rect = rect
        self.message = ""
        self.is_error = False
        self.frames_left = 0
        self.total_frames = 1

    def show(self, message: str, frames: int = 180, error: bool = False) -> None:
        self.message = message
        self.is_error = error
        self.frames_left = self.total_frames = max(1, frames)

    @property
    def visible(self) -> bool:
        return self.frames_left > 0 and bool(self.message)

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        if not self.visible:
            return
        self.frames_left -= 1
        # last quarter of the lifetime fades out
        alpha = min(1.0, self.frames_left / (self.total_frames / 4))
        band = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        background = self.ERROR_BACKGROUND if self.is_error else self.INFO_BACKGROUND
        band.fill(background + (int(170 * alpha),))
        surface.blit(band, self.rect)
        label = font.render(self.message, True, (255, 255, 255))
        label.set_alpha(int(255 * alpha))
        surface.blit(label, label.get_rect(center=self.rect.center))


def draw_tooltip(surface: pygame.Surface, font: pygame.font.Font, text: str, pos: Tuple[int, int]) -> None:
    """Hover text box next to the mouse, kept inside the window."""
    label = font.render(text, True, (20, 20, 20))
    rect = label.get_rect(topleft=(pos[0] + 14, pos[1] + 18)).inflate(12, 8)
    rect.clamp_ip(surface.get_rect())
    pygame.draw.rect(surface, (250, 250, 220), rect, border_radius=4)
    pygame.draw.rect(surface, (90, 90, 90), rect, 1, border_radius=4)
    surface.blit(label, label.get_rect(center=rect.center))


class GameOverDialog:
    def __init__(
        self,
        rect: pygame.Rect,
        title: str,
        on_new_game: Callable[[], None],
        on_dismiss: Callable[[], None],
        subtitle: Optional[str] = None,
    ) -> None:
        self.rect = rect
        self.title = title
        self.subtitle = subtitle
        self.on_new_game = on_new_game
        self.on_dismiss = on_dismiss

        w = 120
        h = 40
        spacing = 20
        total_w = 2 * w + spacing
        start_x = rect.centerx - total_w // 2
        y = rect.bottom - h - 24

        self.new_game_rect = pygame.Rect(start_x, y, w, h)
        self.dismiss_rect = pygame.Rect(start_x + w + spacing, y, w, h)
        self.hover_new_game = False
        self.hover_dismiss = False

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(surface, (50, 50, 50), self.rect, border_radius=12)
        pygame.draw.rect(surface, (255, 255, 255), self.rect, 2, border_radius=12)

        title_surf = font.render(self.title, True, (255, 255, 255))
        surface.blit(title_surf, title_surf.get_rect(center=(self.rect.centerx, self.rect.y + 36)))
        if self.subtitle:
            sub_surf = font.render(self.subtitle, True, (200, 200, 200))
            surface.blit(sub_surf, sub_surf.get_rect(center=(self.rect.centerx, self.rect.y + 66)))

        new_game_color = (66, 224, 133) if self.hover_new_game else (46, 204, 113)
        dismiss_color = (120, 120, 120) if self.hover_dismiss else (90, 90, 90)
        self._draw_button(surface, font, self.new_game_rect, "New game", new_game_color)
        self._draw_button(surface, font, self.dismiss_rect, "Dismiss", dismiss_color)

    def _draw_button(self, surface, font, rect, text, color):
        pygame.draw.rect(surface, color, rect, border_radius=8)
        pygame.draw.rect(surface, (255, 255, 255), rect, 1, border_radius=8)
        txt = font.render(text, True, (255, 255, 255))
        surface.blit(txt, txt.get_rect(center=rect.center))

    def handle_mouse_move(self, pos: Tuple[int, int]) -> None:
        self.hover_new_game = self.new_game_rect.collidepoint(pos)
        self.hover_dismiss = self.dismiss_rect.collidepoint(pos)

    def handle_mouse_down(self, pos: Tuple[int, int]) -> bool:
        if self.new_game_rect.collidepoint(pos):
            self.on_new_game()
            return True
        if self.dismiss_rect.collidepoint(pos):
            self.on_dismiss()
            return True
        return False
