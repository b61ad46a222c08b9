"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from baton_server.models.agents import (
    AgentListResponse,
    AgentStatusResponse,
    ProbeResponse,
    ReachabilityUpdateRequest,
    RegisterAgentRequest,
)
from baton_server.models.chat import ChatRequest, ChatResponse
from baton_server.models.health import HealthResponse
from baton_server.models.sessions import (
    CancelSessionResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionSummaryResponse,
)
from baton_server.models.stats import StatsResponse
from baton_server.models.tools import (
    CheckAgentHealthRequest,
    ExecuteWorkflowRequest,
    SendMessageToAgentRequest,
    ToolResponse,
)
from baton_server.models.workflows import (
    RunWorkflowRequest,
    StepResponse,
    StepTemplateModel,
    WorkflowEventData,
    WorkflowListResponse,
    WorkflowResponse,
    WorkflowTemplateListResponse,
    WorkflowTemplateModel,
)

__all__ = [
    "AgentListResponse",
    "AgentStatusResponse",
    "CancelSessionResponse",
    "ChatRequest",
    "ChatResponse",
    "CheckAgentHealthRequest",
    "ExecuteWorkflowRequest",
    "HealthResponse",
    "ProbeResponse",
    "ReachabilityUpdateRequest",
    "RegisterAgentRequest",
    "RunWorkflowRequest",
    "SendMessageToAgentRequest",
    "SessionDetailResponse",
    "SessionListResponse",
    "SessionSummaryResponse",
    "StatsResponse",
    "StepResponse",
    "StepTemplateModel",
    "ToolResponse",
    "WorkflowEventData",
    "WorkflowListResponse",
    "WorkflowResponse",
    "WorkflowTemplateListResponse",
    "WorkflowTemplateModel",
]
