"""Display properties shared by all components of a ``Lines`` instance.

``Lines.globals`` holds the defaults every component is initialized with:
the tab width, the default and highlight styles, the function
highlighting a focused line and the scroll bar definition.  Setting one
of them on ``Lines.globals`` propagates it to all components which did
not set it themselves; setting it on a component's ``globals`` only
affects that component, and from then on it ignores propagated updates
of that property::

    lines.globals.set_style(StyleType.HIGHLIGHT, Style(bg=4))
    cmp.globals.set_tab_width(8)  # local: ignores global tab widths
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from lines.style import DEFAULT_STYLE, Attr, Style

logger = logging.getLogger(__name__)

Highlighter = Callable[[Style], Style]


class StyleType(enum.Enum):
    DEFAULT = "default"
    HIGHLIGHT = "highlight"


@dataclass(frozen=True)
class ScrollBarDef:
    """Style of a scroll bar's column and of its position mark."""

    style: Style = Style(bg=238)
    position: Style = Style(bg=250)


DEFAULT_SCROLL_BAR = ScrollBarDef()

# names of the properties reported to update listeners
TAB_WIDTH = "tab_width"
HIGHLIGHTER = "highlighter"
SCROLL_BAR = "scroll_bar"


def _default_styles() -> dict[StyleType, Style]:
    return {
        StyleType.DEFAULT: DEFAULT_STYLE,
        StyleType.HIGHLIGHT: DEFAULT_STYLE.with_attrs(Attr.REVERSE),
    }


class Globals:
    """Tab width, styles, highlighter and scroll bar of one scope.

    *propagation* is given for the instance-wide globals: it returns the
    component globals a setter propagates to.  *on_update* is called with
    the name of each property (or ``StyleType``) which changed.
    """

    def __init__(
        self,
        tab_width: int = 4,
        propagation: Callable[[], Iterable[Globals]] | None = None,
        on_update: Callable[[object], None] | None = None,
    ) -> None:
        self._tab_width = max(1, tab_width)
        self._styles = _default_styles()
        self._highlighter: Highlighter | None = None
        self._scroll_bar = DEFAULT_SCROLL_BAR
        # properties set locally which propagation doesn't override
        self._local: set[object] = set()
        self._propagation = propagation
        self.on_update = on_update

    def clone(self, on_update: Callable[[object], None] | None = None) -> Globals:
        """Copy of the values without propagation and local markers."""
        cpy = Globals(self._tab_width, on_update=on_update)
        cpy._styles = dict(self._styles)
        cpy._highlighter = self._highlighter
        cpy._scroll_bar = self._scroll_bar
        return cpy

    # ------------------------------------------------------------------
    # Setting and propagating
    # ------------------------------------------------------------------

    def _set(self, key: object, apply: Callable[[Globals], None]) -> None:
        apply(self)
        self._local.add(key)
        self._updated(key)
        if self._propagation is None:
            return
        for gg in self._propagation():
            if gg is self or key in gg._local:
                continue
            apply(gg)
            gg._updated(key)

    def _updated(self, key: object) -> None:
        if self.on_update is not None:
            self.on_update(key)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def tab_width(self) -> int:
        return self._tab_width

    def set_tab_width(self, width: int) -> Globals:
        """Set the tab width; a width below one is ignored."""
        if width <= 0:
            logger.debug("ignoring tab width %d", width)
            return self

        def apply(gg: Globals) -> None:
            gg._tab_width = width

        self._set(TAB_WIDTH, apply)
        return self

    def style(self, st: StyleType) -> Style:
        return self._styles.get(st, DEFAULT_STYLE)

    def set_style(self, st: StyleType, style: Style) -> Globals:
        def apply(gg: Globals) -> None:
            gg._styles[st] = style

        self._set(st, apply)
        return self

    def set_attrs(self, st: StyleType, attrs: Attr) -> Globals:
        current = self.style(st)
        return self.set_style(st, Style(attrs, current.fg, current.bg))

    def set_fg(self, st: StyleType, fg: int | None) -> Globals:
        return self.set_style(st, self.style(st).with_fg(fg))

    def set_bg(self, st: StyleType, bg: int | None) -> Globals:
        return self.set_style(st, self.style(st).with_bg(bg))

    def highlight(self, style: Style) -> Style:
        """Style of a highlighted cell whose style is *style*.

        Without a highlighter set this is the ``HIGHLIGHT`` style.
        """
        if self._highlighter is None:
            return self.style(StyleType.HIGHLIGHT)
        return self._highlighter(style)

    def set_highlighter(self, highlighter: Highlighter | None) -> Globals:
        """Set the function styling highlighted cells.

        ``None`` restores the default, the ``HIGHLIGHT`` style.
        ``Style.highlighted`` is a highlighter keeping cell colors.
        """

        def apply(gg: Globals) -> None:
            gg._highlighter = highlighter

        self._set(HIGHLIGHTER, apply)
        return self

    @property
    def scroll_bar(self) -> ScrollBarDef:
        return self._scroll_bar

    def set_scroll_bar(self, sbd: ScrollBarDef) -> Globals:
        def apply(gg: Globals) -> None:
            gg._scroll_bar = sbd

        self._set(SCROLL_BAR, apply)
        return self
