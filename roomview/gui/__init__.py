"""
roomview GUI Module
===================

Interactive pygame widgets for the viewer's generator panel.

Components:
- widgets: RadioGroupWidget, ButtonWidget, DropdownWidget, WidgetManager
"""

from .widgets import (
    WidgetState,
    WidgetTheme,
    BaseWidget,
    RadioGroupWidget,
    DropdownWidget,
    ButtonWidget,
    WidgetManager,
)

__all__ = [
    'WidgetState',
    'WidgetTheme',
    'BaseWidget',
    'RadioGroupWidget',
    'DropdownWidget',
    'ButtonWidget',
    'WidgetManager',
]
