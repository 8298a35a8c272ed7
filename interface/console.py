"""
Console interface: play the shared game over stdin/stdout.

Speaks the same JSON message contract as the WebSocket endpoint, one message
per line, so the game can be driven from a terminal, a script, or a test
harness without a browser.

Input lines:
    {"type": "move", "move": {...}}   handled exactly like a WebSocket frame
    {"type": "init"}                  accepted and ignored
    state                             re-send the current state as "init"
    reset                             start a new game
    quit                              exit

Output: every server message as a single JSON line on stdout, flushed
immediately. Diagnostics go to stderr so stdout stays machine-readable.

Example session:
    $ python interface/console.py
    {"type": "init", "state": {...}}
    {"type": "move", "move": {"piece": "A-P1", "startPosition": [0, 0], "endPosition": [1, 0], "currentPlayer": "A"}}
    {"type": "update", "state": {...}}
"""

import json
import logging
import os
import sys
from typing import TextIO

# ---------------------------------------------------------------------------
# Path setup: make 'engine' and 'web' importable when this script is run
# directly as `python interface/console.py` from the repo root.
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from web.messages import init_message
from web.session import SessionCoordinator

_log = logging.getLogger(__name__)


class StreamConnection:
    """A coordinator connection that writes each message as a JSON line."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self.closed = False

    @property
    def is_open(self) -> bool:
        return not self.closed

    def send_nowait(self, message: dict) -> None:
        self._stream.write(json.dumps(message) + "\n")
        self._stream.flush()


class ConsoleHandler:
    """
    Stateful handler for the console protocol.

    Attributes:
        session:    The coordinator owning the game.
        connection: The stdout connection registered with it.
    """

    def __init__(
        self,
        session: SessionCoordinator | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.session = session if session is not None else SessionCoordinator()
        self.connection = StreamConnection(output if output is not None else sys.stdout)
        self.session.connect(self.connection)

    def handle_line(self, line: str) -> bool:
        """
        Dispatch one input line.

        Returns:
            False once the session should end, True otherwise.
        """
        line = line.strip()
        if not line:
            return True

        if line.startswith("{"):
            self.session.handle_text(self.connection, line)
        elif line == "state":
            self.connection.send_nowait(init_message(self.session.current_state()))
        elif line == "reset":
            self.session.reset()
        elif line == "quit":
            self.close()
            return False
        else:
            _log.warning("console: ignoring unknown command: %r", line)
        return True

    def close(self) -> None:
        self.connection.closed = True
        self.session.disconnect(self.connection)


def run_console_loop(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    """
    Read lines from stdin until "quit" or end of input.

    Each line is handled in isolation; an unexpected error is logged to stderr
    and the loop carries on with the next line.
    """
    handler = ConsoleHandler(output=stdout)
    try:
        for raw_line in stdin:
            try:
                if not handler.handle_line(raw_line):
                    return
            except Exception:
                _log.exception("console: unhandled error for line %r", raw_line)
    finally:
        handler.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    run_console_loop()
