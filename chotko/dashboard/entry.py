"""Dashboard entry point: the curses input loop and the command runner."""

from __future__ import annotations

import curses
import logging
import os
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from curses import wrapper as curses_wrapper
from typing import TYPE_CHECKING, Any

from ..constants import DEFAULT_WORKERS
from .commands import Cmd, connect_cmd, logout_cmd, tick_cmd
from .display import DashboardDisplay
from .keys import key_message, mouse_message
from .messages import ErrorMsg, ResizeMsg
from .model import DashboardModel
from .update import update

if TYPE_CHECKING:
    from ..cli_types import DashboardArgs

logger = logging.getLogger(__name__)

INPUT_TIMEOUT_MS = 100


class Runner:
    """Feeds messages through :func:`update` and runs the resulting commands.

    Commands execute on a thread pool. Their messages are posted to a FIFO
    queue that the loop thread drains, so the model is only ever touched
    from one thread.
    """

    def __init__(self, model: DashboardModel, *, workers: int = DEFAULT_WORKERS) -> None:
        self.model = model
        self.messages: queue.Queue[Any] = queue.Queue()
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chotko")

    def start(self) -> None:
        model = self.model
        self.submit(
            [
                connect_cmd(model.connection, model.cancel_event),
                tick_cmd(model.refresh_interval, model.cancel_event),
            ]
        )

    def submit(self, cmds: list[Cmd]) -> None:
        for cmd in cmds:
            future = self.executor.submit(cmd)
            future.add_done_callback(lambda f, name=cmd.name: self._deliver(name, f))

    def _deliver(self, name: str, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.debug("command %s raised %r", name, error)
            self.messages.put(ErrorMsg("Unexpected Error", f"Command {name} failed", error))
            return
        msg = future.result()
        if msg is not None:
            self.messages.put(msg)

    def dispatch(self, msg: Any) -> None:
        self.model, cmds = update(self.model, msg)
        if cmds and not self.model.quitting:
            self.submit(cmds)

    def drain(self) -> bool:
        """Dispatch every queued message. Returns True if any arrived."""
        handled = False
        while not self.model.quitting:
            try:
                msg = self.messages.get_nowait()
            except queue.Empty:
                break
            self.dispatch(msg)
            handled = True
        return handled

    def shutdown(self) -> None:
        """Cancel outstanding work, log out and close the HTTP session.

        Logout runs on the calling thread with its own timeout because the
        shared cancellation event is already set at this point. Closing the
        session afterwards drops pooled connections held by worker threads.
        """
        self.model.cancel_event.set()
        if self.model.client is not None:
            logout_cmd(self.model.client)()
            self.model.client.close()
        self.executor.shutdown(wait=False, cancel_futures=True)


def input_message(stdscr, key: int) -> Any:
    """Translate one ``getch`` result into a message, or None to ignore it."""
    if key == curses.KEY_RESIZE:
        height, width = stdscr.getmaxyx()
        return ResizeMsg(width, height)
    if key == curses.KEY_MOUSE:
        try:
            _, x, y, _, bstate = curses.getmouse()
        except curses.error:
            return None
        return mouse_message(x, y, bstate)
    return key_message(key)


def run_dashboard(args: DashboardArgs) -> None:
    """Run the interactive dashboard until the user quits."""
    # esc must not wait for an escape sequence for a whole second
    os.environ.setdefault("ESCDELAY", "25")
    model = DashboardModel(args.config, ignores=args.ignores, theme=args.theme)
    runner = Runner(model, workers=args.workers)

    def curses_main(stdscr) -> None:
        stdscr.nodelay(True)
        stdscr.timeout(INPUT_TIMEOUT_MS)
        curses.mousemask(curses.ALL_MOUSE_EVENTS)
        curses.mouseinterval(0)
        display = DashboardDisplay(stdscr, model, theme=args.theme)

        height, width = stdscr.getmaxyx()
        runner.dispatch(ResizeMsg(width, height))
        runner.start()
        display.draw_screen()

        while True:
            dirty = False
            key = stdscr.getch()
            if key != -1:
                msg = input_message(stdscr, key)
                if msg is not None:
                    runner.dispatch(msg)
                    dirty = True
                if runner.model.quitting:
                    return
                # After a key, check whether more input is pending so bursts
                # of scroll events are handled before the next redraw
                peek = stdscr.getch()
                if peek != -1:
                    curses.ungetch(peek)
                    continue
            if runner.drain():
                dirty = True
            if runner.model.quitting:
                return
            if dirty:
                display.draw_screen()

    try:
        curses_wrapper(curses_main)
    finally:
        runner.shutdown()
