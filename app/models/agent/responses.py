from pydantic import BaseModel


class AgentStepResponse(BaseModel):
    action: str
    result: str


class AgentResponse(BaseModel):
    result: str
    steps: list[AgentStepResponse] | None = None


class AgentToolResponse(BaseModel):
    id: str
    name: str
    description: str
