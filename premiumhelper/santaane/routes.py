"""HTTP endpoint used by the wizard script to analyze an abstract."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.dependencies import HostState, get_host_state, request_context_for
from ..core.logging import analysis_logger as logger
from ..core.request import RequestContext
from ..core.wizard import SUBMISSION_PAGE
from .errors import AbstractValidationError, AIServiceError
from .helper import PremiumSubmissionHelper


PLUGIN_NAME = PremiumSubmissionHelper.name

router = APIRouter(tags=["santaane"])


class AnalyzeRequest(BaseModel):
    """Body of an analysis request."""

    text: str = Field(default="", max_length=20000)


def get_helper(host: HostState = Depends(get_host_state)) -> PremiumSubmissionHelper:
    """The loaded plugin's helper, or 404 when the plugin is not enabled."""
    module = host.plugin_manager.get_module(PLUGIN_NAME)
    helper = getattr(module, "helper", None)
    if helper is None or not helper.registered:
        raise HTTPException(status_code=404, detail="Not found")
    return helper


@router.post("/{venue_path}/api/santaane/analyze")
async def analyze_abstract(
    body: AnalyzeRequest,
    context: RequestContext = Depends(request_context_for(SUBMISSION_PAGE)),
    helper: PremiumSubmissionHelper = Depends(get_helper),
    host: HostState = Depends(get_host_state),
):
    """Analyze an abstract for an eligible visitor."""
    if not helper.gate.is_eligible(context.venue, context.visitor):
        raise HTTPException(status_code=403, detail="Premium access required")

    if not host.config.ai.is_configured:
        raise HTTPException(status_code=503, detail="The AI service is not configured.")

    try:
        result = await host.analyzer.analyze(body.text)
    except AbstractValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AIServiceError as e:
        logger.error(f"Analysis for user {context.visitor.id} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return result.model_dump(by_alias=True)
