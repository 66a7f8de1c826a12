from fastapi import APIRouter, HTTPException, status

from app.api.dependencies import AgentServiceDep, AuthContextDep, ChatRateLimitedContextDep
from app.api.error_handlers import provider_error_to_http
from app.models.agent.requests import AgentRequest
from app.models.agent.responses import AgentResponse, AgentToolResponse
from app.services.llm.errors import ProviderError
from app.services.provider_key_service import ProviderKeyNotUsable

router = APIRouter(
    prefix="/agent",
    tags=["agent"],
)


@router.post("/execute", response_model=AgentResponse, response_model_exclude_none=True)
async def execute_agent(
    request_body: AgentRequest,
    context: ChatRateLimitedContextDep,
    agent_service: AgentServiceDep,
) -> AgentResponse:
    """
    Run one agent tool. `steps` is present only when the reply contains
    more than one step marker.
    """
    try:
        result = await agent_service.execute(context.user_id, request_body)
    except ProviderKeyNotUsable as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or missing API key for this provider",
        ) from e
    except ProviderError as e:
        raise provider_error_to_http(e) from e

    return result.to_response()


@router.get("/tools", response_model=list[AgentToolResponse])
async def list_tools(
    context: AuthContextDep,
    agent_service: AgentServiceDep,
) -> list[AgentToolResponse]:
    return agent_service.list_tools()
