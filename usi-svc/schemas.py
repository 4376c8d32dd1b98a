from typing import List, Optional
from pydantic import BaseModel, Field, conint

# Constrained types (v2 style)
ThinkMs = conint(ge=1, le=600_000)   # cap a single byoyomi at ten minutes

class InitRequest(BaseModel):
    enginePath: Optional[str] = Field(None, description="Engine command; defaults to USI_ENGINE_PATH")

    model_config = {"extra": "forbid"}

class MoveRequest(BaseModel):
    sfen: str = Field(..., min_length=1, description="Position as SFEN (passed to the engine verbatim)")
    timeMs: ThinkMs = 1000
    moves: List[str] = Field(default_factory=list, description="USI moves played since `sfen`")

    model_config = {"extra": "forbid",
        "json_schema_extra": {"description": "Ask the engine for a move with a fixed byoyomi."}
    }

class MoveResponse(BaseModel):
    move: str

class StatusResponse(BaseModel):
    ok: bool = True
    message: str

class ReadyResponse(BaseModel):
    ready: bool
