"""Request and response models for the DuoDebate HTTP API."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from debate_stream.models import Message


class DebateRequest(BaseModel):
    """Body of a debate submission."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    max_iterations: int = Field(default=10, alias="maxIterations")

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Reject blank prompts before they reach the service."""
        if not v.strip():
            raise ValueError("Prompt is required")
        return v.strip()

    @field_validator("max_iterations")
    @classmethod
    def validate_max_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max iterations must be at least 1")
        if v > 20:
            raise ValueError("Max iterations must not exceed 20")
        return v

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class DebateResult(BaseModel):
    """Response of the non-streaming debate endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    transcript: list[Message] = Field(default_factory=list)
    final_status: str | None = Field(default=None, alias="finalStatus")
    total_iterations: int | None = Field(default=None, alias="totalIterations")
    final_draft: str | None = Field(default=None, alias="finalDraft")
    sources: list[str] = Field(default_factory=list)

    @field_validator("transcript", "sources", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v


class ModelInfo(BaseModel):
    """Models the service has assigned to each role."""

    model_config = ConfigDict(populate_by_name=True)

    proposer_model: str | None = Field(default=None, alias="proposerModel")
    challenger_model: str | None = Field(default=None, alias="challengerModel")
