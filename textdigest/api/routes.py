from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import AppSettings
from ..models import HealthResponse, ProviderHealthStatus, SummaryRequest, SummaryResult
from ..summarization import SummarizationService

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()


def get_summarization_service(request: Request) -> SummarizationService:
    return request.app.state.summarization


def get_app_settings(request: Request) -> AppSettings:
    return request.app.state.settings


@router.post(
    "/text/summarize",
    response_model=SummaryResult,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid request"},
        502: {"description": "Completion provider error"},
        504: {"description": "Completion provider timed out"},
    },
)
async def summarize_text(
    payload: SummaryRequest,
    service: SummarizationService = Depends(get_summarization_service),
) -> SummaryResult:
    """Summarize the provided text and return key bullet points."""
    logger.info(
        "Processing text summarization request",
        extra={"text_length": len(payload.text)},
    )
    return await service.summarize(payload)


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    service: SummarizationService = Depends(get_summarization_service),
    settings: AppSettings = Depends(get_app_settings),
):
    """Aggregate dependency health."""
    provider = await service.check_health()
    services = {
        "completion_provider": ProviderHealthStatus(
            healthy=provider.healthy,
            latency_ms=provider.latency_ms,
            error=provider.error,
        )
    }

    healthy = all(status.healthy for status in services.values())
    body = HealthResponse(
        status="Healthy" if healthy else "Degraded",
        version=settings.version,
        services=services,
    )
    return JSONResponse(
        status_code=200 if healthy else 503,
        content=body.model_dump(mode="json", by_alias=True),
    )
