"""
Wire message models for the game WebSocket.

Both directions carry JSON objects with a "type" discriminator. Inbound
messages are parsed through a pydantic discriminated union so that anything
malformed (bad JSON, missing fields, unknown type) surfaces as a single
ValidationError the coordinator can log and drop.

Field names are snake_case in Python and camelCase on the wire
(startPosition, currentPlayer, moveHistory), matching the browser client.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from engine import GameState, MoveRequest, Player


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Client -> server
# ---------------------------------------------------------------------------


class MovePayload(_WireModel):
    """
    A move as the browser sends it.

    Fields:
        piece:          Piece tag the client believes is on start_position.
        start_position: [row, col] of the piece.
        end_position:   [row, col] to move to.
        current_player: Player the client believes is to move. Checked by the
                        engine against the real turn, never trusted alone.
    """

    piece: str
    start_position: tuple[int, int]
    end_position: tuple[int, int]
    current_player: str

    def to_request(self) -> MoveRequest:
        return MoveRequest(
            piece=self.piece,
            start=self.start_position,
            end=self.end_position,
            claimed_player=self.current_player,
        )


class ClientInit(_WireModel):
    type: Literal["init"]


class ClientMove(_WireModel):
    type: Literal["move"]
    move: MovePayload


ClientMessage = Annotated[Union[ClientInit, ClientMove], Field(discriminator="type")]

client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes) -> ClientInit | ClientMove:
    """
    Parse one inbound frame.

    Raises:
        pydantic.ValidationError: The frame is not valid JSON or does not match
                                  any client message.
    """
    return client_message_adapter.validate_json(raw)


# ---------------------------------------------------------------------------
# Server -> client
# ---------------------------------------------------------------------------


class StatePayload(_WireModel):
    """GameState as sent to clients."""

    board: list[list[str | None]]
    current_player: Literal["A", "B"]
    move_history: dict[str, list[str]]

    @classmethod
    def from_state(cls, state: GameState) -> "StatePayload":
        return cls.model_validate(state.to_dict())


class ServerInit(_WireModel):
    type: Literal["init"] = "init"
    state: StatePayload


class ServerUpdate(_WireModel):
    type: Literal["update"] = "update"
    state: StatePayload


class InvalidMove(_WireModel):
    type: Literal["invalidMove"] = "invalidMove"
    reason: str


class GameOver(_WireModel):
    type: Literal["gameOver"] = "gameOver"
    winner: Literal["A", "B"]


def init_message(state: GameState) -> dict:
    return ServerInit(state=StatePayload.from_state(state)).model_dump(by_alias=True)


def update_message(state: GameState) -> dict:
    return ServerUpdate(state=StatePayload.from_state(state)).model_dump(by_alias=True)


def invalid_move_message(reason: str) -> dict:
    return InvalidMove(reason=reason).model_dump(by_alias=True)


def game_over_message(winner: Player) -> dict:
    return GameOver(winner=winner.value).model_dump(by_alias=True)
