"""
Session coordinator: one live game shared by every connected client.

The coordinator owns a GameEngine and is the only thing allowed to mutate it.
Connections hand it raw inbound frames; it parses them, applies moves, and
pushes the resulting messages back out:

    connect      -> "init" (plus "gameOver" if the game already ended) to the
                    new connection only
    valid move   -> "update" to every open connection, then "gameOver" to every
                    open connection if the move won
    invalid move -> "invalidMove" to the requesting connection only
    malformed    -> logged and dropped; nobody is told

Threading model:
    None of the methods here await or block. They are meant to be called from a
    single asyncio event loop, which is what serializes access to the engine:
    each frame is parsed, applied and its replies enqueued before the loop can
    run anything else. Delivery is delegated to Connection.send_nowait, which
    must only enqueue, so a slow client never stalls the coordinator. A
    connection whose send raises is dropped without affecting the others.
"""

import logging
from typing import Protocol

from pydantic import ValidationError

from engine import GameEngine, GameState, MoveRequest, MoveResult
from web.messages import (
    ClientInit,
    ClientMove,
    game_over_message,
    init_message,
    invalid_move_message,
    parse_client_message,
    update_message,
)

_log = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything the coordinator can push messages to."""

    @property
    def is_open(self) -> bool: ...

    def send_nowait(self, message: dict) -> None: ...


class SessionCoordinator:
    """
    Relays moves from any connection into one GameEngine and fans results out.

    Attributes:
        engine: The game this session owns for its whole lifetime.
    """

    def __init__(self, engine: GameEngine | None = None) -> None:
        self.engine: GameEngine = engine if engine is not None else GameEngine()
        self._connections: list[Connection] = []

    @property
    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._connections)

    def current_state(self) -> GameState:
        return self.engine.current_state()

    # -----------------------------------------------------------------------
    # Connection lifecycle
    # -----------------------------------------------------------------------

    def connect(self, connection: Connection) -> None:
        """Register a connection and send it the current game."""
        self._connections.append(connection)
        _log.info("Client connected (%d open)", len(self._connections))

        self.send(connection, init_message(self.engine.current_state()))
        if self.engine.winner is not None:
            self.send(connection, game_over_message(self.engine.winner))

    def disconnect(self, connection: Connection) -> None:
        if connection in self._connections:
            self._connections.remove(connection)
            _log.info("Client disconnected (%d open)", len(self._connections))

    # -----------------------------------------------------------------------
    # Inbound
    # -----------------------------------------------------------------------

    def handle_text(self, connection: Connection, raw: str | bytes) -> None:
        """
        Handle one raw frame from connection.

        Malformed frames are logged and ignored: they never reach the engine
        and never produce a reply.
        """
        try:
            message = parse_client_message(raw)
        except ValidationError as exc:
            _log.warning(
                "Dropping malformed message (%d errors): %.200r",
                exc.error_count(),
                raw,
            )
            return

        if isinstance(message, ClientMove):
            self.submit_move(connection, message.move.to_request())
        elif isinstance(message, ClientInit):
            # The init reply already went out on connect.
            pass

    def submit_move(self, connection: Connection, request: MoveRequest) -> MoveResult:
        """
        Apply request and notify clients of the outcome.

        Args:
            connection: Where the move came from; the only recipient of a
                        rejection.
            request:    The move to try.

        Returns:
            The engine's MoveResult.
        """
        result = self.engine.apply_move(request)
        _log.info(
            "Move %s %s->%s by %s: %s",
            request.piece,
            request.start,
            request.end,
            request.claimed_player,
            _describe_result(result),
        )

        if not result.valid:
            self.send(connection, invalid_move_message(result.reason))
            return result

        self.broadcast(update_message(self.engine.current_state()))
        if result.winner is not None:
            self.broadcast(game_over_message(result.winner))
        return result

    def reset(self) -> GameState:
        """Start a new game and push the fresh board to everyone."""
        self.engine.reset()
        state = self.engine.current_state()
        _log.info("Game reset")
        self.broadcast(update_message(state))
        return state

    # -----------------------------------------------------------------------
    # Outbound
    # -----------------------------------------------------------------------

    def broadcast(self, message: dict) -> None:
        """Send message to every open connection, skipping closed ones."""
        for connection in list(self._connections):
            if not connection.is_open:
                continue
            self.send(connection, message)

    def send(self, connection: Connection, message: dict) -> None:
        """
        Deliver message to one connection.

        A connection whose send fails is logged and dropped from the session;
        the failure never reaches the caller or the other connections.
        """
        try:
            connection.send_nowait(message)
        except Exception:
            _log.exception("Send failed, dropping connection")
            self.disconnect(connection)


def _describe_result(result: MoveResult) -> str:
    if not result.valid:
        return f"rejected ({result.reason})"
    if result.winner is not None:
        return f"accepted, {result.winner.value} wins"
    return "accepted"
