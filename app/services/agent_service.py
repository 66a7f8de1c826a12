import re
from datetime import datetime, timezone
from typing import assert_never
from uuid import uuid4

from app.models.agent.models import AgentResult, AgentStep
from app.models.agent.requests import AgentRequest, AgentTool
from app.models.agent.responses import AgentToolResponse
from app.models.chat.models import ChatMessage
from app.services.llm.llm_service import LlmService
from app.services.provider_key_service import ProviderKeyService
from prompts.agent_prompts import (
    CODE_SYSTEM_PROMPT,
    CODE_USER_PROMPT_TEMPLATE,
    MATH_SYSTEM_PROMPT,
    MATH_USER_PROMPT_TEMPLATE,
    RESEARCH_SYSTEM_PROMPT,
    RESEARCH_USER_PROMPT_TEMPLATE,
    SUMMARIZE_SYSTEM_PROMPT,
    SUMMARIZE_USER_PROMPT_TEMPLATE,
    TASK_SYSTEM_PROMPT,
    TASK_USER_PROMPT_TEMPLATE,
    TOOL_DESCRIPTIONS,
)

# A step runs from a "Step N" marker (or a leading "N.") up to the next marker or the end
_STEP_RE = re.compile(r"(?:Step \d+|^\d+\.)(.*?)(?=Step \d+|^\d+\.|\Z)", re.DOTALL)


def tool_prompts(tool: AgentTool, user_input: str) -> tuple[str, str]:
    """Return the (system, user) prompt pair for a tool"""
    match tool:
        case AgentTool.RESEARCH:
            return RESEARCH_SYSTEM_PROMPT, RESEARCH_USER_PROMPT_TEMPLATE.format(input=user_input)
        case AgentTool.MATH:
            return MATH_SYSTEM_PROMPT, MATH_USER_PROMPT_TEMPLATE.format(input=user_input)
        case AgentTool.CODE:
            return CODE_SYSTEM_PROMPT, CODE_USER_PROMPT_TEMPLATE.format(input=user_input)
        case AgentTool.TASK:
            return TASK_SYSTEM_PROMPT, TASK_USER_PROMPT_TEMPLATE.format(input=user_input)
        case AgentTool.SUMMARIZE:
            return SUMMARIZE_SYSTEM_PROMPT, SUMMARIZE_USER_PROMPT_TEMPLATE.format(input=user_input)
        case _:
            assert_never(tool)


def parse_steps(content: str) -> list[AgentStep] | None:
    """Split a reply into steps; a single step marker is not treated as a plan"""
    matches = [m.group(0).strip() for m in _STEP_RE.finditer(content)]
    if len(matches) <= 1:
        return None
    return [AgentStep(action=f"Step {i}", result=text) for i, text in enumerate(matches, start=1)]


class AgentService:
    def __init__(self, llm_service: LlmService, provider_key_service: ProviderKeyService) -> None:
        self._llm_service = llm_service
        self._provider_key_service = provider_key_service

    def list_tools(self) -> list[AgentToolResponse]:
        tools = []
        for tool in AgentTool:
            name, description = TOOL_DESCRIPTIONS[tool.value]
            tools.append(AgentToolResponse(id=tool.value, name=name, description=description))
        return tools

    async def execute(self, user_id: str, request: AgentRequest) -> AgentResult:
        key = self._provider_key_service.get_usable_key(user_id, request.provider)

        system_prompt, user_prompt = tool_prompts(request.tool, request.input)
        now = datetime.now(timezone.utc)
        messages = [
            ChatMessage(id=str(uuid4()), role="system", content=system_prompt, timestamp=now),
            ChatMessage(id=str(uuid4()), role="user", content=user_prompt, timestamp=now),
        ]

        response = await self._llm_service.chat(request.provider, key.secret, request.model, messages)
        content = response.message.content
        return AgentResult(result=content, steps=parse_steps(content))
