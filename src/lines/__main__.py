"""Small demo: a scrollable, line focusable list next to an editable note.

Run with ``python -m lines`` or ``lines-demo``; quit with ``q`` or Ctrl+C.
"""

from __future__ import annotations

import argparse
import logging

from lines.component import Chaining, Component, Stacking
from lines.config import Config
from lines.env import Env
from lines.features import Feature
from lines.layout import LayerPos
from lines.line import LineFlags
from lines.style import Attr, Style
from lines.ui import Lines


class Items(Component):
    def on_init(self, env: Env) -> None:
        self.ff.add(Feature.LINES_SELECTABLE | Feature.SCROLLABLE | Feature.FOCUSABLE)
        self.scroll.bar = True
        env.ll(0).write("items (Enter shows a dialog)").flag(LineFlags.NOT_FOCUSABLE)
        for i in range(1, 100):
            env.ll(i).write(f"item {i:3d}")

    def on_line_selection(self, env: Env, c_idx: int, s_idx: int) -> None:
        dialog = Dialog(f"selected item {c_idx}", self)
        self.layered(env, dialog, LayerPos(width="50%"))


class Note(Component):
    def on_init(self, env: Env) -> None:
        self.ff.add(Feature.EDITABLE)
        env.write("press Insert to edit, Esc to stop\n\t\tindented")


class Dialog(Component):
    def __init__(self, text: str, host: Component) -> None:
        self.text = text
        self.host = host

    def on_init(self, env: Env) -> None:
        self.style = Style(Attr.BOLD, bg=4)
        gg = self.gaps(0)
        gg.horizontal.filling().write("─")
        gg.vertical.filling().write("│")
        gg.corners.write("╭╮╯╰")
        env.write(f"{self.text}\n(click anywhere)")

    def on_out_of_bound_click(self, env: Env) -> bool:
        env.lines.remove_layer(self.host)
        return False

    def on_click(self, env: Env, x: int, y: int) -> None:
        self.on_out_of_bound_click(env)


class Panes(Chaining, Component):
    def __init__(self) -> None:
        self.cc = [Items(), Note()]


class App(Stacking, Component):
    def __init__(self) -> None:
        self.cc = [Panes()]

    def on_init(self, env: Env) -> None:
        self.ff.add_recursive(Feature.SELECTABLE)


def main() -> None:
    parser = argparse.ArgumentParser(description="lines: terminal UI demo")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
    )
    parser.add_argument(
        "--log-file",
        default="lines-demo.log",
        help="Log file; logging to the terminal would garble the screen",
    )
    parser.add_argument("--kiosk", action="store_true", help="Disable quit keys")
    args = parser.parse_args()

    logging.basicConfig(
        filename=args.log_file,
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config = Config.from_env()
    if args.kiosk:
        config = Config.kiosk_config(queue_size=config.queue_size)
    Lines(App(), config=config).start()


if __name__ == "__main__":
    main()
