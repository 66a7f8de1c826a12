from enum import Enum

from pydantic import BaseModel, Field

from app.models.provider import Provider


class AgentTool(str, Enum):
    RESEARCH = "research"
    MATH = "math"
    CODE = "code"
    TASK = "task"
    SUMMARIZE = "summarize"


class AgentRequest(BaseModel):
    tool: AgentTool
    input: str = Field(..., min_length=1, max_length=32000, description="Task input for the agent")
    provider: Provider
    model: str = Field(..., min_length=1)
