"""
Agent Routes - introspection of the registered specialist agents.
"""
from typing import List

from fastapi import APIRouter

from medassist.agents import get_orchestrator
from medassist.models.chat import AgentInfoResponse

router = APIRouter(prefix="/agents", tags=["Agents"])


@router.get(
    "",
    response_model=List[AgentInfoResponse],
    summary="List registered agents",
    description="Each agent with its description and capabilities (including JSON schemas)."
)
def list_agents() -> List[AgentInfoResponse]:
    return [AgentInfoResponse(**info) for info in get_orchestrator().get_agents_info()]
