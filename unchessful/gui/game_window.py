import logging
import webbrowser
from dataclasses import dataclass
from typing import List, Optional, Tuple

import chess
import pygame

from .. import config
from ..engine.coordinator import RemoteMoveCoordinator, RemoteMoveStatus
from ..engine.dispatcher import Reply, RequestDispatcher
from ..game_logic import ChessGame, ClickResult, HumanVsEngine, HumanVsHuman
from ..models import EngineDescription, EngineDirectory, EngineRef, EngineVariant
from ..moves import color_name
from .chess_board_ui import THEMES, BoardRenderer, fit_square_size
from .dialogs import GameOverDialog, MessageOverlay, PromotionDialog, draw_tooltip
from .menu_handler import Button, ButtonBar, Selector

log = logging.getLogger(__name__)

PALETTES = {
    "dark": {"background": (27, 27, 27), "panel": (36, 36, 36), "text": (230, 230, 230), "muted": (150, 150, 150)},
    "light": {"background": (235, 235, 235), "panel": (214, 214, 214), "text": (25, 25, 25), "muted": (90, 90, 90)},
}
ERROR_COLOR = (231, 76, 60)
LINK_COLOR = (90, 170, 255)


@dataclass
class EngineData:
    available_engines: Optional[EngineDirectory] = None
    desc: Optional[EngineDescription] = None
    error: Optional[str] = None


class GameWindow:
    def __init__(self, dispatcher: Optional[RequestDispatcher] = None) -> None:
        pygame.init()
        pygame.display.set_caption("Unchessful Games")
        self.screen = pygame.display.set_mode((config.WINDOW_WIDTH, config.WINDOW_HEIGHT), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.running = True
        self.dispatcher = (dispatcher or RequestDispatcher()).start()

        self.game = ChessGame()
        self.engine_data = EngineData()
        self.engine_dir_reply: Optional[Reply[EngineDirectory]] = None
        self.engine_desc_reply: Optional[Reply[EngineDescription]] = None
        self.reported_ai_error: Optional[Exception] = None

        self.heading_font = pygame.font.SysFont("arial", 20, bold=True)
        self.side_font = pygame.font.SysFont("arial", 16)
        self.small_font = pygame.font.SysFont("arial", 14)
        self.dark_mode = True

        self.board_renderer = BoardRenderer((0, 0))
        self.board_renderer.load()
        self.message_overlay = MessageOverlay(pygame.Rect(0, 0, 0, 0))
        self.promotion_dialog: Optional[PromotionDialog] = None
        self.game_over_dialog: Optional[GameOverDialog] = None
        self.url_rect: Optional[pygame.Rect] = None

        self.top_bar = ButtonBar(pygame.Rect(0, 0, config.WINDOW_WIDTH, config.TOP_BAR_HEIGHT), button_width=130)
        self.top_bar.add_button("Quit", self.quit_game)
        self.btn_dark_light = self.top_bar.add_button("Light mode", self.toggle_dark_mode)
        self.btn_board_theme = self.top_bar.add_button("Board: Classic", self.cycle_theme)

        self.btn_update_engines = Button(pygame.Rect(0, 0, 0, 0), "Update info", self.fetch_engines)
        self.engine_selector: Selector[EngineRef] = Selector(
            pygame.Rect(0, 0, 0, 0), lambda e: e.name, on_change=self.on_engine_changed
        )
        self.btn_update_variants = Button(pygame.Rect(0, 0, 0, 0), "Update info", self.fetch_engine_description)
        self.variant_selector: Selector[EngineVariant] = Selector(pygame.Rect(0, 0, 0, 0), lambda v: v.name)
        self.btn_play_black = Button(pygame.Rect(0, 0, 0, 0), "Play", lambda: self.start_engine_game(chess.BLACK))
        self.btn_play_white = Button(pygame.Rect(0, 0, 0, 0), "Play as White", lambda: self.start_engine_game(chess.WHITE))
        self.btn_self_play = Button(pygame.Rect(0, 0, 0, 0), "Play against yourself", self.start_self_play)
        self.btn_retry = Button(pygame.Rect(0, 0, 0, 0), "Retry", self.retry_engine_move)
        self.layout()
        self.fetch_engines()

    @property
    def palette(self) -> dict:
        return PALETTES["dark" if self.dark_mode else "light"]

    def panel_widgets(self) -> List[object]:
        return [
            self.btn_update_engines,
            self.engine_selector,
            self.btn_update_variants,
            self.variant_selector,
            self.btn_play_black,
            self.btn_play_white,
            self.btn_self_play,
            self.btn_retry,
        ]

    def layout(self) -> None:
        width, height = self.screen.get_size()
        self.top_bar.rect.width = width
        self.panel_rect = pygame.Rect(
            width - config.SIDE_PANEL_WIDTH,
            config.TOP_BAR_HEIGHT,
            config.SIDE_PANEL_WIDTH,
            height - config.TOP_BAR_HEIGHT - config.FOOTER_HEIGHT,
        )
        board_area = pygame.Rect(0, config.TOP_BAR_HEIGHT, self.panel_rect.x, self.panel_rect.height)
        square_size = fit_square_size(board_area.width - 20, board_area.height - 20)
        board_px = square_size * 10
        self.board_renderer.layout(
            (board_area.centerx - board_px // 2, board_area.centery - board_px // 2),
            square_size,
        )
        self.message_overlay.rect = pygame.Rect(0, height - config.FOOTER_HEIGHT - 34, self.panel_rect.x, 30)

        x = self.panel_rect.x + 12
        w = self.panel_rect.width - 24
        y = self.panel_rect.y + 10
        self.btn_update_engines.rect = pygame.Rect(x + w - 110, y, 110, 28)
        self.engine_selector.place(pygame.Rect(x, y + 38, w, 30))
        self.btn_update_variants.rect = pygame.Rect(x + w - 110, y + 168, 110, 28)
        self.variant_selector.place(pygame.Rect(x, y + 296, w, 30))
        half = (w - 10) // 2
        self.btn_play_black.rect = pygame.Rect(x, y + 338, half, 32)
        self.btn_play_white.rect = pygame.Rect(x + half + 10, y + 338, half, 32)
        self.btn_self_play.rect = pygame.Rect(x, y + 378, w, 32)
        self.btn_retry.rect = pygame.Rect(x + w - 90, y + 562, 90, 28)
        self.panel_y = y

    # --- engine metadata ---
    def fetch_engines(self) -> None:
        self.engine_data.available_engines = None
        self.engine_data.error = None
        self.engine_dir_reply = self.dispatcher.fetch_engines()

    def fetch_engine_description(self) -> None:
        engine = self.engine_selector.selected
        if engine is None:
            return
        self.engine_data.error = None
        self.engine_desc_reply = self.dispatcher.fetch_engine_description(engine)

    def on_engine_changed(self, engine: Optional[EngineRef]) -> None:
        self.engine_data.desc = None
        self.engine_desc_reply = None
        self.variant_selector.set_options([])

    def poll_engine_replies(self) -> None:
        if self.engine_dir_reply is not None:
            result = self.engine_dir_reply.try_take()
            if result is not None:
                self.engine_dir_reply = None
                if result.ok:
                    self.engine_data.available_engines = result.value
                    self.engine_selector.set_options(result.value.engines)
                    self.on_engine_changed(self.engine_selector.selected)
                else:
                    log.warning("Could not load engines: %s", result.error)
                    self.engine_data.error = f"Could not load engines: {result.error}"
        if self.engine_desc_reply is not None:
            result = self.engine_desc_reply.try_take()
            if result is not None:
                self.engine_desc_reply = None
                if result.ok:
                    desc = result.value
                    self.engine_data.desc = desc
                    variants = list(desc.variants)
                    if desc.best_available_variant not in variants:
                        variants.insert(0, desc.best_available_variant)
                    self.variant_selector.set_options(variants, selected=desc.best_available_variant)
                else:
                    log.warning("Could not load variants: %s", result.error)
                    self.engine_data.error = f"Could not load variants: {result.error}"

    # --- games ---
    def replace_game(self, game: ChessGame) -> None:
        self.game.stop_game()
        self.game = game
        self.board_renderer.orientation = game.player_color
        self.promotion_dialog = None
        self.game_over_dialog = None
        self.reported_ai_error = None
        self.game.start_game()

    def start_engine_game(self, player_color: chess.Color, variant: Optional[EngineVariant] = None) -> None:
        variant = variant or self.variant_selector.selected
        if variant is None:
            return
        log.info("Starting game as %s against %s", color_name(player_color), variant.game_url)
        coordinator = RemoteMoveCoordinator(self.dispatcher, variant)
        self.replace_game(ChessGame(player_color, HumanVsEngine(coordinator)))
        self.message_overlay.show(f"Playing {color_name(player_color)} against {variant.name}", frames=150)

    def start_self_play(self) -> None:
        self.replace_game(ChessGame(chess.WHITE, HumanVsHuman()))
        self.message_overlay.show("New game started", frames=120)

    def new_game(self) -> None:
        if isinstance(self.game.game_mode, HumanVsEngine):
            self.start_engine_game(self.game.player_color, self.game.game_mode.variant)
        else:
            self.start_self_play()

    def retry_engine_move(self) -> None:
        self.game.retry_ai_move()
        self.reported_ai_error = None

    def dismiss_game_over(self) -> None:
        self.game.dismiss_game_over()
        self.game_over_dialog = None

    # --- top bar ---
    def quit_game(self) -> None:
        self.running = False

    def toggle_dark_mode(self) -> None:
        self.dark_mode = not self.dark_mode
        self.btn_dark_light.label = "Light mode" if self.dark_mode else "Dark mode"

    def cycle_theme(self) -> None:
        themes = list(THEMES.keys())
        idx = themes.index(self.board_renderer.theme_name)
        self.board_renderer.set_theme(themes[(idx + 1) % len(themes)])
        self.btn_board_theme.label = "Board: " + self.board_renderer.theme_name

    # --- board input ---
    def handle_board_click(self, pos: Tuple[int, int]) -> None:
        square = self.board_renderer.pixel_to_square(*pos)
        if square is None:
            return
        anchor = self.board_renderer.square_to_rect(square).center
        result = self.game.click(square, anchor)
        if result is ClickResult.PROMOTION_PENDING:
            dialog = PromotionDialog(
                anchor,
                self.board_renderer.square_size,
                self.handle_promotion_choice,
                self.board_renderer.piece_images,
                self.game.promotion.color,
            )
            dialog.layout(self.screen.get_rect())
            self.promotion_dialog = dialog

    def handle_promotion_choice(self, role: chess.PieceType) -> None:
        self.game.choose_promotion_role(role)
        self.promotion_dialog = None

    def handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self.layout()
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                if self.promotion_dialog is not None:
                    self.game.cancel_promotion()
                    self.promotion_dialog = None
                else:
                    self.game.deselect()
            elif event.type == pygame.MOUSEMOTION:
                self.handle_mouse_move(event.pos)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.handle_mouse_down(event.pos)

    def handle_mouse_move(self, pos: Tuple[int, int]) -> None:
        if self.game_over_dialog is not None:
            self.game_over_dialog.handle_mouse_move(pos)
        self.top_bar.handle_mouse_move(pos)
        for widget in self.panel_widgets():
            widget.handle_mouse_move(pos)

    def handle_mouse_down(self, pos: Tuple[int, int]) -> None:
        if self.game_over_dialog is not None:
            self.game_over_dialog.handle_mouse_down(pos)
            return
        if self.promotion_dialog is not None:
            self.promotion_dialog.handle_mouse_down(pos)
            return
        if self.top_bar.handle_mouse_down(pos):
            return
        for widget in self.panel_widgets():
            if widget.handle_mouse_down(pos):
                return
        if self.url_rect is not None and self.url_rect.collidepoint(pos):
            engine = self.engine_selector.selected
            if engine is not None:
                webbrowser.open(engine.entrypoint_url)
            return
        if self.board_renderer.board_rect().collidepoint(pos):
            self.handle_board_click(pos)

    # --- per frame ---
    def update(self) -> None:
        self.poll_engine_replies()
        status = self.game.update_ai_move()
        if status is RemoteMoveStatus.ERROR:
            error = self.game.ai_move_error()
            if error is not self.reported_ai_error:
                self.reported_ai_error = error
                self.message_overlay.show("Engine move failed, press Retry", frames=240, error=True)

        if self.game.is_game_over and not self.game.game_over_is_dismissed and self.game_over_dialog is None:
            termination = self.game.termination()
            outcome = termination.outcome()
            title = "Draw" if outcome.winner is None else f"{color_name(outcome.winner)} wins"
            rect = pygame.Rect(0, 0, 360, 170)
            rect.center = self.board_renderer.board_rect().center
            self.game_over_dialog = GameOverDialog(
                rect,
                f"Game over: {title} ({outcome.result()})",
                self.new_game,
                self.dismiss_game_over,
                subtitle=self.game.why_game_not_running(),
            )

    def blit_text(self, text: str, pos: Tuple[int, int], font=None, color=None) -> pygame.Rect:
        font = font or self.side_font
        surf = font.render(text, True, color or self.palette["text"])
        return self.screen.blit(surf, pos)

    def blit_wrapped(self, text: str, x: int, y: int, width: int, max_lines: int, font=None, color=None) -> int:
        font = font or self.side_font
        lines: List[str] = []
        current_line: List[str] = []
        for word in text.split():
            test_line = " ".join(current_line + [word])
            if font.size(test_line)[0] < width or not current_line:
                current_line.append(word)
            else:
                lines.append(" ".join(current_line))
                current_line = [word]
        if current_line:
            lines.append(" ".join(current_line))
        if len(lines) > max_lines:
            lines = lines[:max_lines]
            lines[-1] = lines[-1] + " ..."
        for line in lines:
            self.blit_text(line, (x, y), font, color)
            y += font.get_linesize()
        return y

    def draw_side_panel(self) -> None:
        pygame.draw.rect(self.screen, self.palette["panel"], self.panel_rect)
        muted = self.palette["muted"]
        x = self.panel_rect.x + 12
        w = self.panel_rect.width - 24
        y = self.panel_y

        self.blit_text("Select engine", (x, y + 2), self.heading_font)
        self.btn_update_engines.enabled = self.engine_dir_reply is None
        self.btn_update_engines.draw(self.screen, self.small_font)
        self.engine_selector.draw(self.screen, self.side_font)

        self.url_rect = None
        engine = self.engine_selector.selected
        if engine is not None:
            self.blit_text("Name", (x, y + 80), self.small_font, muted)
            self.blit_text(engine.name, (x + 60, y + 80), self.small_font)
            self.blit_text("Id", (x, y + 100), self.small_font, muted)
            self.blit_text(engine.engine_id, (x + 60, y + 100), self.small_font)
            self.blit_text("URL", (x, y + 120), self.small_font, muted)
            self.url_rect = self.blit_text(engine.entrypoint_url, (x + 60, y + 120), self.small_font, LINK_COLOR)
        elif self.engine_dir_reply is not None:
            self.blit_text("Loading engines...", (x, y + 80), self.small_font, muted)

        self.blit_text("Select variant", (x, y + 170), self.heading_font)
        self.btn_update_variants.enabled = engine is not None and self.engine_desc_reply is None
        self.btn_update_variants.draw(self.screen, self.small_font)
        desc = self.engine_data.desc
        if desc is not None:
            self.blit_text(desc.name, (x, y + 206), self.side_font)
            self.blit_wrapped(desc.text_description, x, y + 230, w, 3, self.small_font, muted)
        self.variant_selector.draw(self.screen, self.side_font)

        has_variant = self.variant_selector.selected is not None
        self.btn_play_black.enabled = has_variant
        self.btn_play_white.enabled = has_variant
        self.btn_play_black.draw(self.screen, self.side_font)
        self.btn_play_white.draw(self.screen, self.side_font)
        self.btn_self_play.draw(self.screen, self.side_font)

        self.blit_text("Game", (x, y + 428), self.heading_font)
        self.blit_wrapped(self.game.status_text(), x, y + 456, w, 1)
        if self.game.is_waiting_for_ai_move():
            self.blit_text("Waiting for engine...", (x, y + 480), self.side_font, muted)
        info = self.game.last_ai_move_info()
        if info is not None:
            self.blit_text(f"Engine played {info.move_san}", (x, y + 500))
            self.blit_wrapped(info.timing_text(), x, y + 520, w, 1, self.small_font, muted)
            self.blit_wrapped(info.status_text, x, y + 538, w, 1, self.small_font, muted)

        error = self.game.ai_move_error()
        self.btn_retry.enabled = error is not None
        if error is not None:
            self.blit_wrapped(f"Engine move failed: {error}", x, y + 562, w - 100, 2, self.small_font, ERROR_COLOR)
            self.btn_retry.draw(self.screen, self.small_font)
        elif self.engine_data.error:
            self.blit_wrapped(self.engine_data.error, x, y + 562, w, 2, self.small_font, ERROR_COLOR)

        self.draw_move_list(x, y + 604, self.panel_rect.bottom - 8)

    def draw_move_list(self, x: int, y: int, bottom: int) -> None:
        self.blit_text("Moves", (x, y), self.heading_font)
        y += 26
        formatted_lines = []
        for i in range(0, len(self.game.move_log), 2):
            pair = " ".join(self.game.move_log[i:i + 2])
            formatted_lines.append(f"{i // 2 + 1}. {pair}")
        max_lines = max(0, (bottom - y) // self.small_font.get_linesize())
        for line in formatted_lines[-max_lines:] if max_lines else []:
            self.blit_text(line, (x, y), self.small_font)
            y += self.small_font.get_linesize()

    def draw_footer(self) -> None:
        width, height = self.screen.get_size()
        rect = pygame.Rect(0, height - config.FOOTER_HEIGHT, width, config.FOOTER_HEIGHT)
        pygame.draw.rect(self.screen, self.palette["panel"], rect)
        self.blit_text("Powered by pygame and python-chess.", (10, rect.y + 6), self.small_font, self.palette["muted"])

    def draw(self) -> None:
        self.screen.fill(self.palette["background"])
        pygame.draw.rect(self.screen, self.palette["panel"], self.top_bar.rect)
        self.top_bar.draw(self.screen, self.small_font)
        self.board_renderer.draw_board(self.screen, self.game)
        self.draw_side_panel()
        self.draw_footer()
        self.message_overlay.draw(self.screen, self.small_font)
        if self.promotion_dialog is not None:
            self.promotion_dialog.draw(self.screen, self.side_font)
        if self.game_over_dialog is not None:
            self.game_over_dialog.draw(self.screen, self.side_font)

        mouse = pygame.mouse.get_pos()
        if not self.game.game_is_going and self.game_over_dialog is None and self.board_renderer.board_rect().collidepoint(mouse):
            draw_tooltip(self.screen, self.small_font, self.game.why_game_not_running(), mouse)
        pygame.display.flip()

    def run(self) -> None:
        try:
            while self.running:
                self.handle_events()
                self.update()
                self.draw()
                self.clock.tick(config.FPS)
        finally:
            self.dispatcher.close(timeout=1.0)
            pygame.quit()


def run() -> None:
    window = GameWindow()
    window.run()
