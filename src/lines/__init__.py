"""lines: terminal UI toolkit with feature bindings and line focus."""

# Components
from lines.component import Chaining, Component, Stacking

# Configuration
from lines.config import Config

# Editing
from lines.editor import Edit, EditType

# Callback environment
from lines.env import ComponentMode, Env

# Errors
from lines.errors import (
    DisabledComponentError,
    LinesError,
    NotInitializedError,
    QueueFullError,
)

# Events
from lines.events import (
    Event,
    KeyEvent,
    MouseEvent,
    MouseKind,
    ResizeEvent,
    RuneEvent,
    UpdateEvent,
)

# Features
from lines.features import Feature, FeatureButton, FeatureKey, FeatureRune

# Gaps
from lines.gaps import Corner, GapsWriter, Side

# Display properties
from lines.globals import Globals, ScrollBarDef, StyleType

# Keyboard and mouse constants
from lines.keys import Button, Key, Modifier

# Geometry
from lines.layout import LayerPos

# Content lines
from lines.line import LineFlags

# Screen
from lines.screen import CursorStyle

# Content sources
from lines.source import (
    ContentSource,
    EditLiner,
    FocusableLiner,
    Liner,
    ScrollableLiner,
)

# Styles
from lines.style import Attr, Style, StyleRange

# Terminal
from lines.terminal import ProcessTerminal, Terminal

# Control surface
from lines.ui import Lines

__all__ = [
    # Components
    "Chaining",
    "Component",
    "Stacking",
    # Configuration
    "Config",
    # Editing
    "Edit",
    "EditType",
    # Callback environment
    "ComponentMode",
    "Env",
    # Errors
    "DisabledComponentError",
    "LinesError",
    "NotInitializedError",
    "QueueFullError",
    # Events
    "Event",
    "KeyEvent",
    "MouseEvent",
    "MouseKind",
    "ResizeEvent",
    "RuneEvent",
    "UpdateEvent",
    # Features
    "Feature",
    "FeatureButton",
    "FeatureKey",
    "FeatureRune",
    # Gaps
    "Corner",
    "GapsWriter",
    "Side",
    # Display properties
    "Globals",
    "ScrollBarDef",
    "StyleType",
    # Keys
    "Button",
    "Key",
    "Modifier",
    # Geometry
    "LayerPos",
    # Content lines
    "LineFlags",
    # Screen
    "CursorStyle",
    # Content sources
    "ContentSource",
    "EditLiner",
    "FocusableLiner",
    "Liner",
    "ScrollableLiner",
    # Styles
    "Attr",
    "Style",
    "StyleRange",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    # Control surface
    "Lines",
]
