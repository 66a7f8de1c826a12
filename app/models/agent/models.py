from dataclasses import dataclass

from app.models.agent.responses import AgentResponse, AgentStepResponse


@dataclass
class AgentStep:
    action: str
    result: str


@dataclass
class AgentResult:
    result: str
    steps: list[AgentStep] | None = None

    def to_response(self) -> AgentResponse:
        return AgentResponse(
            result=self.result,
            steps=[AgentStepResponse(action=s.action, result=s.result) for s in self.steps] if self.steps else None,
        )
