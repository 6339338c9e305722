from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal
from datetime import datetime, timezone

Role = Literal["user", "assistant", "system"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)

    def as_openai(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatContext(BaseModel):
    """Current contracts (raw fields + computed metrics) sent alongside every chat turn."""
    model_config = ConfigDict(populate_by_name=True)

    contracts: List[Dict[str, Any]] = []
    total_contracts: int = Field(default=0, alias="totalContracts")


class ContractScore(BaseModel):
    score: int = Field(ge=1, le=10)
    reasoning: str = ""
    pros: List[str] = []
    cons: List[str] = []
    recommendations: List[str] = []

    @field_validator("score", mode="before")
    @classmethod
    def _round_score(cls, v):
        # models sometimes answer 7.5
        if isinstance(v, float):
            return int(round(v))
        return v
