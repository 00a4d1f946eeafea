from __future__ import annotations

from typing import List, Tuple, Union

from pydantic import BaseModel, Field, model_validator


class InputCommand(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class ExitCommand(BaseModel):
    pass


class ResetCommand(BaseModel):
    pass


class SetupMessage(BaseModel):
    slot: int = Field(ge=0, le=1)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    walls: str
    items: List[Tuple[float, float]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_walls(self) -> SetupMessage:
        if len(self.walls) != self.width * self.height:
            raise ValueError("wall bits must cover width * height cells")
        if set(self.walls) - {"0", "1"}:
            raise ValueError("wall bits must be 0 or 1")
        return self


class PlayerSnapshot(BaseModel):
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    score: int = Field(ge=0)


class StateMessage(BaseModel):
    timer: float = Field(ge=0, allow_inf_nan=False)
    players: Tuple[PlayerSnapshot, PlayerSnapshot]
    items_active: List[bool] = Field(default_factory=list)


class GameOverMessage(BaseModel):
    winner: int = Field(ge=-1, le=1)  # -1 on a draw
    scores: Tuple[int, int]


class ShutdownMessage(BaseModel):
    pass


WireMessage = Union[
    InputCommand,
    ExitCommand,
    ResetCommand,
    SetupMessage,
    StateMessage,
    GameOverMessage,
    ShutdownMessage,
]
