from __future__ import annotations

import sys
import threading
from typing import TextIO

from apps.cli.output import overwrite_line


class ProgressIndicator:
    """Elapsed-seconds ticker redrawn in place on the current output line.

    Ticks run on a daemon thread that only writes to the terminal. At most one
    indicator should be running at a time; :meth:`stop` is a no-op when the
    indicator was never started.
    """

    def __init__(self, *, interval_s: float = 1.0, file: TextIO | None = None) -> None:
        self.interval_s = float(interval_s)
        self._file = file
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None

    def _out(self) -> TextIO:
        return self._file if self._file is not None else sys.stdout

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            overwrite_line(f"....{self.ticks}s", file=self._out())
            self.ticks += 1

    def start(self) -> None:
        self.ticks = 0
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="progress", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        thread.join()
        self._thread = None
        self.ticks = 0
        overwrite_line("", file=self._out())
