"""
roomview GUI - Interactive Widgets
==================================

Control widgets for the generator panel of the viewer:
- RadioGroupWidget: Choose which generator path the next file pick fills
- ButtonWidget: Execute actions (open file, run, cancel)
- DropdownWidget: Select which stored room is drawn
- WidgetManager: Dispatches mouse events and renders with dropdown Z-ordering

All widgets support mouse interaction and visual feedback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import pygame
from pygame import Rect

logger = logging.getLogger(__name__)


def _font(size: int, bold: bool = False) -> pygame.font.Font:
    # Headless test environments may not have initialized the font module yet
    if not pygame.font.get_init():
        pygame.font.init()
    font = pygame.font.Font(None, size)
    font.set_bold(bold)
    return font


# ==========================================
# WIDGET BASE CLASS
# ==========================================

class WidgetState(Enum):
    """Visual state of widgets."""
    NORMAL = "normal"
    HOVER = "hover"
    ACTIVE = "active"
    DISABLED = "disabled"


@dataclass
class WidgetTheme:
    """Theme colors for widgets."""
    bg_normal: Tuple[int, int, int] = (45, 45, 60)
    bg_hover: Tuple[int, int, int] = (55, 55, 75)
    bg_active: Tuple[int, int, int] = (70, 130, 180)
    bg_disabled: Tuple[int, int, int] = (30, 30, 40)
    text_normal: Tuple[int, int, int] = (220, 220, 230)
    text_disabled: Tuple[int, int, int] = (100, 100, 110)
    border: Tuple[int, int, int] = (80, 80, 100)
    accent: Tuple[int, int, int] = (100, 200, 255)


class BaseWidget:
    """Base class for all GUI widgets."""

    def __init__(self, rect: Rect, theme: Optional[WidgetTheme] = None):
        self.rect = rect
        self.theme = theme or WidgetTheme()
        self.state = WidgetState.NORMAL
        self.enabled = True
        self.visible = True

    def update(self, mouse_pos: Tuple[int, int], dt: float) -> None:
        """Update widget state based on mouse position."""
        if not self.enabled:
            self.state = WidgetState.DISABLED
            return

        if self.rect.collidepoint(mouse_pos):
            if self.state != WidgetState.ACTIVE:
                self.state = WidgetState.HOVER
        else:
            if self.state != WidgetState.ACTIVE:
                self.state = WidgetState.NORMAL

    def handle_mouse_down(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse down event. Returns True if handled."""
        if not self.enabled or not self.visible:
            return False
        return self.rect.collidepoint(pos)

    def handle_mouse_up(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse up event. Returns True if handled."""
        return False

    def render(self, surface: pygame.Surface) -> None:
        """Render the widget. Override in subclasses."""
        pass

    def _colors(self) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
        if self.state == WidgetState.DISABLED:
            return self.theme.bg_disabled, self.theme.text_disabled
        if self.state == WidgetState.HOVER:
            return self.theme.bg_hover, self.theme.text_normal
        return self.theme.bg_normal, self.theme.text_normal


# ==========================================
# RADIO GROUP WIDGET
# ==========================================

class RadioGroupWidget(BaseWidget):
    """
    Horizontal row of mutually exclusive options.

    Features:
    - Filled dot on the selected option
    - Hover feedback
    - Optional on_change callback with the new index
    """

    OPTION_WIDTH = 88
    DOT_SIZE = 16

    def __init__(self, pos: Tuple[int, int], options: Sequence[str],
                 selected: int = 0,
                 on_change: Optional[Callable[[int], None]] = None,
                 theme: Optional[WidgetTheme] = None):
        super().__init__(Rect(pos[0], pos[1], self.OPTION_WIDTH * len(options), self.DOT_SIZE + 4), theme)
        self.options = list(options)
        self.selected = selected
        self.on_change = on_change
        self.hover_option = -1
        self.font = _font(18)

    def option_rect(self, index: int) -> Rect:
        return Rect(self.rect.x + index * self.OPTION_WIDTH, self.rect.y,
                    self.OPTION_WIDTH, self.rect.height)

    def _option_at(self, pos: Tuple[int, int]) -> int:
        for i in range(len(self.options)):
            if self.option_rect(i).collidepoint(pos):
                return i
        return -1

    def update(self, mouse_pos: Tuple[int, int], dt: float) -> None:
        super().update(mouse_pos, dt)
        self.hover_option = self._option_at(mouse_pos) if self.enabled else -1

    def handle_mouse_down(self, pos: Tuple[int, int], button: int) -> bool:
        """Select the clicked option."""
        if not self.enabled or not self.visible or button != 1:
            return False
        index = self._option_at(pos)
        if index < 0:
            return False
        if index != self.selected:
            self.selected = index
            if self.on_change:
                self.on_change(index)
        return True

    def render(self, surface: pygame.Surface) -> None:
        if not self.visible:
            return
        bg_color, text_color = self._colors()
        for i, option in enumerate(self.options):
            rect = self.option_rect(i)
            dot = Rect(rect.x, rect.y + 2, self.DOT_SIZE, self.DOT_SIZE)
            fill = self.theme.bg_hover if i == self.hover_option else bg_color
            pygame.draw.ellipse(surface, fill, dot)
            pygame.draw.ellipse(surface, self.theme.border, dot, 2)
            if i == self.selected:
                pygame.draw.ellipse(surface, self.theme.accent, dot.inflate(-8, -8))
            label = self.font.render(option, True, text_color)
            surface.blit(label, (dot.right + 6, rect.y + 3))


# ==========================================
# DROPDOWN WIDGET
# ==========================================

class DropdownWidget(BaseWidget):
    """
    Dropdown menu widget for selecting from multiple options.

    Features:
    - Click to expand/collapse
    - Hover highlighting
    - Long lists scroll with the mouse wheel (MAX_VISIBLE rows shown)
    - Options can be replaced while keeping the selection by value
    """

    OPTION_HEIGHT = 24
    MAX_VISIBLE = 8

    def __init__(self, pos: Tuple[int, int], label: str,
                 options: List[str], selected: int = 0,
                 on_select: Optional[Callable[[int], None]] = None,
                 width: int = 240,
                 theme: Optional[WidgetTheme] = None):
        super().__init__(Rect(pos[0], pos[1], width, 28), theme)
        self.label = label
        self.options = list(options)
        self.selected = selected
        self.on_select = on_select
        self.is_open = False
        self.hover_option = -1
        self.scroll_offset = 0
        self.font = _font(18)
        self.label_font = _font(16, bold=True)
        self._layout()

    @property
    def visible_count(self) -> int:
        return max(1, min(len(self.options), self.MAX_VISIBLE))

    @property
    def max_scroll(self) -> int:
        return max(0, len(self.options) - self.visible_count)

    def _layout(self) -> None:
        self.dropdown_rect = Rect(
            self.rect.x, self.rect.y + 30,
            self.rect.width, self.visible_count * self.OPTION_HEIGHT
        )
        self.scroll_offset = max(0, min(self.scroll_offset, self.max_scroll))

    @property
    def value(self) -> Optional[str]:
        if 0 <= self.selected < len(self.options):
            return self.options[self.selected]
        return None

    def set_options(self, options: Sequence[str], selected_value: Optional[str] = None) -> None:
        """Replace the option list, selecting ``selected_value`` if present."""
        self.options = list(options)
        if selected_value is not None and selected_value in self.options:
            self.selected = self.options.index(selected_value)
        else:
            self.selected = min(self.selected, max(0, len(self.options) - 1))
        self._layout()

    def option_at(self, pos: Tuple[int, int]) -> int:
        """Index of the option under ``pos`` in the open list, or -1."""
        if not self.dropdown_rect.collidepoint(pos):
            return -1
        row = int((pos[1] - self.dropdown_rect.y) // self.OPTION_HEIGHT)
        index = self.scroll_offset + row
        return index if 0 <= row < self.visible_count and index < len(self.options) else -1

    def scroll_to(self, index: int) -> None:
        """Scroll so option ``index`` is inside the visible window."""
        if index < self.scroll_offset:
            self.scroll_offset = index
        elif index >= self.scroll_offset + self.visible_count:
            self.scroll_offset = index - self.visible_count + 1
        self.scroll_offset = max(0, min(self.scroll_offset, self.max_scroll))

    def handle_scroll(self, pos: Tuple[int, int], wheel_y: int) -> bool:
        """Scroll the open list; wheel up moves toward the first option."""
        if not self.is_open or not self.dropdown_rect.collidepoint(pos):
            return False
        self.scroll_offset = max(0, min(self.scroll_offset - int(wheel_y), self.max_scroll))
        return True

    def update(self, mouse_pos: Tuple[int, int], dt: float) -> None:
        """Update hover state."""
        if not self.enabled:
            self.state = WidgetState.DISABLED
            self.is_open = False
            return

        if self.is_open:
            self.hover_option = self.option_at(mouse_pos)
        else:
            super().update(mouse_pos, dt)

    def handle_mouse_down(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle click to toggle or select option."""
        if not self.enabled or not self.visible or button != 1:
            return False

        if self.is_open:
            option_idx = self.option_at(pos)
            if option_idx >= 0:
                self.selected = option_idx
                self.is_open = False
                if self.on_select:
                    self.on_select(option_idx)
                return True
            # Clicked outside, close dropdown
            self.is_open = False
            return True

        if self.rect.collidepoint(pos) and self.options:
            self.is_open = True
            self.scroll_to(self.selected)
            return True
        return False

    def render(self, surface: pygame.Surface) -> None:
        """Render dropdown menu."""
        if not self.visible:
            return
        bg_color, text_color = self._colors()

        if self.label:
            label_surf = self.label_font.render(self.label, True, self.theme.text_normal)
            surface.blit(label_surf, (self.rect.x, self.rect.y - label_surf.get_height() - 4))

        pygame.draw.rect(surface, bg_color, self.rect)
        pygame.draw.rect(surface, self.theme.border, self.rect, 2)

        text = self.value if self.value is not None else "(none)"
        text_surf = self.font.render(text, True, text_color)
        surface.blit(text_surf, (self.rect.x + 8, self.rect.y + 7))

        arrow_x = self.rect.right - 20
        arrow_y = self.rect.centery
        if self.is_open:
            points = [(arrow_x, arrow_y + 3), (arrow_x + 8, arrow_y + 3), (arrow_x + 4, arrow_y - 3)]
        else:
            points = [(arrow_x, arrow_y - 3), (arrow_x + 8, arrow_y - 3), (arrow_x + 4, arrow_y + 3)]
        pygame.draw.polygon(surface, text_color, points)

        if self.is_open:
            pygame.draw.rect(surface, self.theme.bg_normal, self.dropdown_rect)
            end = min(len(self.options), self.scroll_offset + self.visible_count)
            for row, i in enumerate(range(self.scroll_offset, end)):
                option_rect = Rect(self.dropdown_rect.x, self.dropdown_rect.y + row * self.OPTION_HEIGHT,
                                   self.dropdown_rect.width, self.OPTION_HEIGHT)
                if i == self.hover_option:
                    pygame.draw.rect(surface, self.theme.bg_hover, option_rect)
                elif i == self.selected:
                    pygame.draw.rect(surface, self.theme.bg_active, option_rect)
                option_surf = self.font.render(self.options[i], True, text_color)
                surface.blit(option_surf, (option_rect.x + 8, option_rect.y + 5))

            if self.max_scroll:
                # Scrollbar thumb along the right edge
                track = self.dropdown_rect.height - 4
                thumb_h = max(8, track * self.visible_count // len(self.options))
                thumb_y = self.dropdown_rect.y + 2 + (track - thumb_h) * self.scroll_offset // self.max_scroll
                pygame.draw.rect(surface, self.theme.accent,
                                 Rect(self.dropdown_rect.right - 6, thumb_y, 4, thumb_h))
            pygame.draw.rect(surface, self.theme.border, self.dropdown_rect, 2)


# ==========================================
# BUTTON WIDGET
# ==========================================

class ButtonWidget(BaseWidget):
    """
    Button widget for executing actions.

    Features:
    - Click callback (fires on release over the button)
    - Hover and active states
    """

    def __init__(self, pos: Tuple[int, int], label: str,
                 callback: Callable[[], None],
                 width: int = 150, height: int = 32,
                 theme: Optional[WidgetTheme] = None):
        super().__init__(Rect(pos[0], pos[1], width, height), theme)
        self.label = label
        self.callback = callback
        self.pressed = False
        self.font = _font(18, bold=True)

    def handle_mouse_down(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse down - mark as pressed."""
        if not self.enabled or not self.visible:
            return False

        if button == 1 and self.rect.collidepoint(pos):
            self.pressed = True
            self.state = WidgetState.ACTIVE
            return True
        return False

    def handle_mouse_up(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse up - execute callback if still over button."""
        if not self.enabled or not self.visible:
            return False

        if button == 1 and self.pressed:
            self.pressed = False
            self.state = WidgetState.NORMAL
            if self.rect.collidepoint(pos):
                if self.callback:
                    self.callback()
                return True
        return False

    def render(self, surface: pygame.Surface) -> None:
        """Render button."""
        if not self.visible:
            return

        if self.state == WidgetState.DISABLED:
            bg_color, text_color, border_color = self.theme.bg_disabled, self.theme.text_disabled, self.theme.border
        elif self.state == WidgetState.ACTIVE or self.pressed:
            bg_color, text_color, border_color = self.theme.bg_active, (255, 255, 255), self.theme.accent
        elif self.state == WidgetState.HOVER:
            bg_color, text_color, border_color = self.theme.bg_hover, self.theme.text_normal, self.theme.accent
        else:
            bg_color, text_color, border_color = self.theme.bg_normal, self.theme.text_normal, self.theme.border

        pygame.draw.rect(surface, bg_color, self.rect, border_radius=4)
        pygame.draw.rect(surface, border_color, self.rect, 2, border_radius=4)

        text_surf = self.font.render(self.label, True, text_color)
        surface.blit(text_surf, text_surf.get_rect(center=self.rect.center))


# ==========================================
# WIDGET MANAGER
# ==========================================

class WidgetManager:
    """
    Manages collection of widgets and handles events.

    Simplifies widget lifecycle management.
    """

    def __init__(self):
        self.widgets: List[BaseWidget] = []

    def add_widget(self, widget: BaseWidget) -> BaseWidget:
        """Add a widget to the manager."""
        self.widgets.append(widget)
        return widget

    def update(self, mouse_pos: Tuple[int, int], dt: float) -> None:
        """Update all widgets."""
        for widget in self.widgets:
            widget.update(mouse_pos, dt)

    def _close_other_dropdowns(self, keep_widget: Optional[DropdownWidget]) -> None:
        for w in self.widgets:
            if isinstance(w, DropdownWidget) and w is not keep_widget:
                w.is_open = False

    def handle_mouse_down(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse down for all widgets. Returns True if any handled."""
        # Open dropdown menus overlap other widgets, so they get the click first
        for widget in reversed(self.widgets):
            if isinstance(widget, DropdownWidget) and widget.is_open:
                if widget.rect.collidepoint(pos) or widget.dropdown_rect.collidepoint(pos):
                    handled = widget.handle_mouse_down(pos, button)
                    self._close_other_dropdowns(widget)
                    return handled
        self._close_other_dropdowns(None)

        for widget in reversed(self.widgets):
            if widget.handle_mouse_down(pos, button):
                if isinstance(widget, DropdownWidget):
                    self._close_other_dropdowns(widget)
                logger.debug('Click at %s handled by %s', pos, widget.__class__.__name__)
                return True
        return False

    def handle_mouse_up(self, pos: Tuple[int, int], button: int) -> bool:
        """Handle mouse up for all widgets. Returns True if any handled."""
        for widget in reversed(self.widgets):
            if widget.handle_mouse_up(pos, button):
                return True
        return False

    def handle_scroll(self, pos: Tuple[int, int], wheel_y: int) -> bool:
        """Give a wheel event to an open dropdown under the pointer."""
        for widget in reversed(self.widgets):
            if isinstance(widget, DropdownWidget) and widget.handle_scroll(pos, wheel_y):
                return True
        return False

    def render(self, surface: pygame.Surface) -> None:
        """Render all widgets, expanded dropdowns last so they draw on top."""
        expanded = [w for w in self.widgets if isinstance(w, DropdownWidget) and w.is_open]
        for widget in self.widgets:
            if widget not in expanded:
                widget.render(surface)
        for widget in expanded:
            widget.render(surface)
