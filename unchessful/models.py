"""JSON bodies exchanged with the engine API."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, field_validator


class ApiModel(BaseModel):
    # The API adds fields over time; keep whatever it sends.
    model_config = ConfigDict(extra="allow", frozen=True)


class EngineRef(ApiModel):
    engine_id: str
    name: str
    entrypoint_url: str


class EngineDirectory(ApiModel):
    engines: List[EngineRef]


class EngineVariant(ApiModel):
    name: str
    game_url: str


class EngineDescription(ApiModel):
    name: str
    text_description: str = ""
    variants: List[EngineVariant]
    best_available_variant: EngineVariant


# --- GAME MOVES ---
class GameMoveRequest(BaseModel):
    fen: str

    @field_validator("fen")
    @classmethod
    def validate_fen(cls, value: str) -> str:
        parts = value.strip().split(" ")
        if len(parts) != 6:
            raise ValueError("FEN string must contain 6 space-separated parts.")
        return value.strip()


class GameMoveResponse(ApiModel):
    move_san: str
    move_timing: Any = None
    status_text: str = ""

    def timing_text(self) -> str:
        if self.move_timing is None:
            return ""
        if not isinstance(self.move_timing, dict):
            return str(self.move_timing)
        return ", ".join(f"{key}: {value}" for key, value in self.move_timing.items())
