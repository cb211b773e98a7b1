from pydantic import BaseModel, Field


class ExecutionResult(BaseModel):
    success: bool
    output: str = ""
    exit_code: int = 0
    duration_ms: float | None = Field(default=None, ge=0)
    error: str | None = None


class ExecutionContext(BaseModel):
    session_id: str = Field(..., min_length=1)
    command_index: int
