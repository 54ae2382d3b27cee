from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar
import pygame


T = TypeVar("T")


class Button:
    def __init__(
        self,
        rect: pygame.Rect,
        label: str,
        callback: Callable[[], None],
        selected: bool = False,
        enabled: bool = True,
    ) -> None:
        self.rect = rect
        self.label = label
        self.callback = callback
        self.hover = False
        self.selected = selected
        self.enabled = enabled

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        if not self.enabled:
            color = (45, 45, 45)
            text_color = (120, 120, 120)
            border_color = (70, 70, 70)
        elif self.selected:
            color = (46, 204, 113)
            text_color = (255, 255, 255)
            border_color = (255, 255, 255)
        elif self.hover:
            color = (90, 90, 90)
            text_color = (255, 255, 255)
            border_color = (180, 180, 180)
        else:
            color = (60, 60, 60)
            text_color = (220, 220, 220)
            border_color = (100, 100, 100)

        pygame.draw.rect(surface, color, self.rect, border_radius=6)
        pygame.draw.rect(surface, border_color, self.rect, 2 if self.selected else 1, border_radius=6)

        text = font.render(self.label, True, text_color)
        surface.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse_move(self, pos: Tuple[int, int]) -> None:
        self.hover = self.rect.collidepoint(pos)

    def handle_mouse_down(self, pos: Tuple[int, int]) -> bool:
        if self.enabled and self.rect.collidepoint(pos):
            self.callback()
            return True
        return False


class ButtonBar:
    def __init__(self, rect: pygame.Rect, button_width: int = 100) -> None:
        self.rect = rect
        self.button_width = button_width
        self.buttons: List[Button] = []

    def add_button(self, label: str, callback: Callable[[], None]) -> Button:
        count = len(self.buttons)
        margin = 6
        x = self.rect.x + margin + count * (self.button_width + margin)
        y = self.rect.y + margin // 2
        button = Button(pygame.Rect(x, y, self.button_width, self.rect.height - margin), label, callback)
        self.buttons.append(button)
        return button

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        for button in self.buttons:
            button.draw(surface, font)

    def handle_mouse_move(self, pos: Tuple[int, int]) -> None:
        for button in self.buttons:
            button.handle_mouse_move(pos)

    def handle_mouse_down(self, pos: Tuple[int, int]) -> bool:
        return any(button.handle_mouse_down(pos) for button in self.buttons)


class Selector(Generic[T]):
    """Pick one of a list of options with previous/next arrows."""

    def __init__(
        self,
        rect: pygame.Rect,
        label_of: Callable[[T], str],
        on_change: Optional[Callable[[Optional[T]], None]] = None,
    ) -> None:
        self.label_of = label_of
        self.on_change = on_change
        self.options: List[T] = []
        self.index = 0
        self.prev_button = Button(pygame.Rect(0, 0, 0, 0), "<", self.previous)
        self.next_button = Button(pygame.Rect(0, 0, 0, 0), ">", self.next)
        self.place(rect)

    def place(self, rect: pygame.Rect) -> None:
        self.rect = rect
        arrow_w = rect.height
        self.prev_button.rect = pygame.Rect(rect.x, rect.y, arrow_w, rect.height)
        self.next_button.rect = pygame.Rect(rect.right - arrow_w, rect.y, arrow_w, rect.height)

    def set_options(self, options: Sequence[T], selected: Optional[T] = None) -> None:
        self.options = list(options)
        self.index = 0
        if selected is not None and selected in self.options:
            self.index = self.options.index(selected)

    @property
    def selected(self) -> Optional[T]:
        if not self.options:
            return None
        return self.options[self.index]

    def previous(self) -> None:
        if self.options:
            self.index = (self.index - 1) % len(self.options)
            self._changed()

    def next(self) -> None:
        if self.options:
            self.index = (self.index + 1) % len(self.options)
            self._changed()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.selected)

    def draw(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        enabled = len(self.options) > 1
        self.prev_button.enabled = enabled
        self.next_button.enabled = enabled
        self.prev_button.draw(surface, font)
        self.next_button.draw(surface, font)
        middle = self.rect.inflate(-2 * self.rect.height - 8, 0)
        pygame.draw.rect(surface, (35, 35, 35), middle, border_radius=4)
        selected = self.selected
        text = self.label_of(selected) if selected is not None else "-"
        label = font.render(text, True, (230, 230, 230))
        surface.blit(label, label.get_rect(center=middle.center))

    def handle_mouse_move(self, pos: Tuple[int, int]) -> None:
        self.prev_button.handle_mouse_move(pos)
        self.next_button.handle_mouse_move(pos)

    def handle_mouse_down(self, pos: Tuple[int, int]) -> bool:
        return self.prev_button.handle_mouse_down(pos) or self.next_button.handle_mouse_down(pos)
