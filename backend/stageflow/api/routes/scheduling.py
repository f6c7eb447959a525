"""
Stage Scheduling API Routes.

Thin HTTP wrapper over the scheduling services: batch scheduling, slot search,
workload and bottleneck analytics, capacity impact, job timelines and due dates.
Domain errors map to status codes: validation 400, no capacity 409, stage
configuration 422 and persistence 503.
"""

from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query
from pydantic import AwareDatetime

from stageflow.api.deps import SchedulingServicesDep
from stageflow.application.dtos.scheduling_dtos import (
    BatchScheduleRequest,
    BatchScheduleResponse,
    CapacityImpactRequest,
    DueDateResponse,
    SlotSearchRequest,
    SlotSearchResponse,
)
from stageflow.core.observability import get_logger
from stageflow.domain.scheduling.read_models import (
    CapacityImpactReport,
    JobTimeline,
    WorkloadSnapshot,
)
from stageflow.domain.shared.exceptions import (
    BatchPersistenceError,
    DomainError,
    ErrorType,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/scheduling", tags=["scheduling"])

ERROR_STATUS = {
    ErrorType.VALIDATION: 400,
    ErrorType.STAGE_CONFIGURATION: 422,
    ErrorType.NO_CAPACITY: 409,
    ErrorType.PERSISTENCE: 503,
}


def _raise_http(error: DomainError) -> NoReturn:
    raise HTTPException(
        status_code=ERROR_STATUS.get(error.error_type, 500),
        detail=error.to_dict(),
    ) from error


@router.post(
    "/batches",
    summary="Schedule a batch of stage requests",
    response_model=BatchScheduleResponse,
    responses={
        400: {"description": "Invalid request"},
        503: {"description": "Bookings could not be persisted"},
    },
)
async def schedule_batch(
    request: BatchScheduleRequest, services: SchedulingServicesDep
) -> BatchScheduleResponse:
    """
    Place every request on its stage. With ``commit`` the placed bookings are
    persisted per job; otherwise the result is a dry run.
    """
    scheduler = services.scheduler
    try:
        result = await scheduler.schedule_batch(
            [item.to_domain() for item in request.requests],
            horizon_days=request.horizon_days,
        )
        if request.commit:
            await scheduler.persist(result)
    except BatchPersistenceError as e:
        logger.error("Batch persisted partially", failed_job_ids=e.details["failed_job_ids"])
        _raise_http(e)
    except DomainError as e:
        _raise_http(e)

    return BatchScheduleResponse.from_result(result, committed=request.commit)


@router.post(
    "/slots/search",
    summary="Find the earliest slot on a stage",
    response_model=SlotSearchResponse,
)
async def search_slot(
    request: SlotSearchRequest, services: SchedulingServicesDep
) -> SlotSearchResponse:
    try:
        result = await services.slot_finder.search(
            request.stage_id,
            request.duration_minutes,
            request.earliest_start,
            horizon_days=request.horizon_days,
        )
    except DomainError as e:
        _raise_http(e)
    return SlotSearchResponse.from_result(request.stage_id, result, services.converter)


@router.get(
    "/workloads",
    summary="Workload of every stage",
    response_model=list[WorkloadSnapshot],
)
async def list_workloads(services: SchedulingServicesDep) -> list[WorkloadSnapshot]:
    try:
        return await services.workload_analyzer.get_all_stage_workloads()
    except DomainError as e:
        _raise_http(e)


@router.get(
    "/workloads/{stage_id}",
    summary="Workload of one stage",
    response_model=WorkloadSnapshot,
)
async def get_workload(stage_id: UUID, services: SchedulingServicesDep) -> WorkloadSnapshot:
    try:
        return await services.workload_analyzer.get_stage_workload(stage_id)
    except DomainError as e:
        _raise_http(e)


@router.get(
    "/bottlenecks",
    summary="Stages whose queue exceeds the bottleneck threshold",
    response_model=list[WorkloadSnapshot],
)
async def list_bottlenecks(
    services: SchedulingServicesDep,
    limit: int = Query(5, ge=1, le=100),
) -> list[WorkloadSnapshot]:
    try:
        return await services.bottleneck_detector.detect(limit)
    except DomainError as e:
        _raise_http(e)


@router.post(
    "/capacity-impact",
    summary="Estimate the queue impact of new work",
    response_model=CapacityImpactReport,
)
async def estimate_capacity_impact(
    request: CapacityImpactRequest, services: SchedulingServicesDep
) -> CapacityImpactReport:
    try:
        return await services.impact_estimator.estimate_impact(request.new_work)
    except DomainError as e:
        _raise_http(e)


@router.get(
    "/jobs/{job_id}/timeline",
    summary="Projected multi-stage timeline of a job",
    response_model=JobTimeline,
)
async def get_job_timeline(job_id: UUID, services: SchedulingServicesDep) -> JobTimeline:
    try:
        return await services.timeline_calculator.calculate_timeline(job_id)
    except DomainError as e:
        _raise_http(e)


@router.get(
    "/jobs/{job_id}/due-date",
    summary="Buffered due date and lateness warning for a job",
    response_model=DueDateResponse,
)
async def get_job_due_date(
    job_id: UUID,
    services: SchedulingServicesDep,
    due_date: AwareDatetime | None = Query(
        None, description="Promised due date to grade the projection against"
    ),
) -> DueDateResponse:
    due_dates = services.due_date_service
    try:
        estimate = await due_dates.calculate_initial_due_date(job_id)
    except DomainError as e:
        _raise_http(e)

    warning = None
    if due_date is not None:
        completion = estimate.internal_completion if estimate else None
        warning = due_dates.grade(job_id, due_date, completion)
    return DueDateResponse(job_id=job_id, estimate=estimate, warning=warning)
