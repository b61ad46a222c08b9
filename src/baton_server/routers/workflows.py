"""Workflow API endpoints.

This module provides endpoints for the template catalog, for running
workflows (with a complete JSON response or as a stream of progress events
via SSE), and for inspecting and cancelling workflow instances.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from sse_starlette.sse import EventSourceResponse

from baton_server.dependencies import get_coordinator, get_workflow_engine
from baton_server.errors import BatonError, WorkflowExecutionError
from baton_server.models.workflows import (
    RunWorkflowRequest,
    WorkflowEventData,
    WorkflowListResponse,
    WorkflowResponse,
    WorkflowTemplateListResponse,
    WorkflowTemplateModel,
)
from baton_server.routers.errors import http_error
from baton_server.services import Coordinator
from baton_server.workflows import WorkflowEngine, WorkflowEvent, WorkflowInstance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/workflows", tags=["workflows"])


@router.get("/templates", response_model=WorkflowTemplateListResponse)
async def list_templates(
    engine: WorkflowEngine = Depends(get_workflow_engine),
) -> WorkflowTemplateListResponse:
    """List the workflow templates that can be run by name."""
    return WorkflowTemplateListResponse(
        templates=[
            WorkflowTemplateModel.from_definition(definition)
            for definition in engine.list_definitions()
        ]
    )


@router.post(
    "/templates",
    response_model=WorkflowTemplateModel,
    status_code=status.HTTP_201_CREATED,
)
async def register_template(
    request: WorkflowTemplateModel,
    engine: WorkflowEngine = Depends(get_workflow_engine),
) -> WorkflowTemplateModel:
    """Register a custom template, replacing any template with the same name.

    Raises:
        HTTPException: 400 if the template is invalid (cycle, unknown
            dependency, undeclared context key)
    """
    try:
        definition = engine.register_definition(request.to_definition())
    except BatonError as e:
        logger.warning(f"Rejected workflow template '{request.name}': {e}")
        raise http_error(e)
    return WorkflowTemplateModel.from_definition(definition)


@router.post("/run", response_model=WorkflowResponse)
async def run_workflow(
    request: RunWorkflowRequest,
    coordinator: Coordinator = Depends(get_coordinator),
) -> WorkflowResponse:
    """Run a named workflow to completion.

    A workflow that fails while running is still a valid result: it is
    returned with status "failed" and the failure reason.

    Raises:
        HTTPException: 404 if the template is unknown, 400 if the context
            does not satisfy it
    """
    try:
        instance = await coordinator.run_workflow(
            request.name, request.context, owner=request.session_id
        )
    except BatonError as e:
        raise http_error(e)
    return WorkflowResponse.from_instance(instance, summary=coordinator.format(instance))


@router.post("/run/stream")
async def run_workflow_streaming(
    request_body: RunWorkflowRequest,
    request: Request,
    coordinator: Coordinator = Depends(get_coordinator),
) -> EventSourceResponse:
    """Run a named workflow and stream its progress via Server-Sent Events.

    The run itself is detached from the HTTP connection: a client that
    disconnects stops receiving events but does not abort the workflow.

    SSE Events:
        - workflow_started, step_started, step_completed, step_failed,
          workflow_completed, workflow_failed: progress events
        - done: the final workflow state

    Raises:
        HTTPException: 404 if the template is unknown, 400 if the context
            does not satisfy it
    """
    try:
        instance = await coordinator.start_workflow(
            request_body.name, request_body.context, owner=request_body.session_id
        )
    except BatonError as e:
        raise http_error(e)

    queue: asyncio.Queue[WorkflowEvent | None] = asyncio.Queue()

    async def run() -> None:
        try:
            await coordinator.engine.run(instance.id, on_event=queue.put)
        except WorkflowExecutionError:
            # Already recorded on the instance and emitted as workflow_failed
            pass
        except Exception as e:
            logger.error(f"Streaming run of workflow {instance.id} crashed: {e}")
        finally:
            await queue.put(None)

    _spawn(request, run())

    async def event_generator():
        """Forward engine events until the run finishes."""
        while True:
            event = await queue.get()
            if event is None:
                break
            yield {
                "event": event.type,
                "data": WorkflowEventData.from_event(event).model_dump_json(),
            }

        yield {
            "event": "done",
            "data": WorkflowResponse.from_instance(
                instance, summary=coordinator.format(instance)
            ).model_dump_json(),
        }

    return EventSourceResponse(event_generator())


def _spawn(request: Request, coro) -> None:
    tasks: set[asyncio.Task] = request.app.state.background_tasks
    task = asyncio.create_task(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)


@router.get("", response_model=WorkflowListResponse)
async def list_workflows(
    engine: WorkflowEngine = Depends(get_workflow_engine),
) -> WorkflowListResponse:
    """List retained workflow instances, oldest first."""
    instances = engine.list()
    return WorkflowListResponse(
        workflows=[WorkflowResponse.from_instance(instance) for instance in instances],
        total=len(instances),
    )


def _get_instance(engine: WorkflowEngine, workflow_id: str) -> WorkflowInstance:
    try:
        return engine.get(workflow_id)
    except BatonError as e:
        raise http_error(e)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: str,
    coordinator: Coordinator = Depends(get_coordinator),
) -> WorkflowResponse:
    """Get one workflow instance with its per-step outcomes.

    Raises:
        HTTPException: 404 if the instance does not exist or was evicted
    """
    instance = _get_instance(coordinator.engine, workflow_id)
    return WorkflowResponse.from_instance(instance, summary=coordinator.format(instance))


@router.post("/{workflow_id}/cancel", response_model=WorkflowResponse)
async def cancel_workflow(
    workflow_id: str,
    engine: WorkflowEngine = Depends(get_workflow_engine),
) -> WorkflowResponse:
    """Cancel a workflow instance.

    A running instance finishes its in-flight step and then stops.

    Raises:
        HTTPException: 404 if the instance does not exist, 409 if it
            already finished
    """
    try:
        instance = await engine.cancel(workflow_id)
    except BatonError as e:
        raise http_error(e)
    return WorkflowResponse.from_instance(instance)
