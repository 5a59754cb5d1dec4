"""Diagnostics endpoint."""

from fastapi import APIRouter

from agentboard.api.dependencies import DiagnosticsDep, DispatcherDep
from agentboard.api.models import APIResponse, DiagnosticsResponse

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.get("", response_model=APIResponse[DiagnosticsResponse])
def get_diagnostics(
    diagnostics: DiagnosticsDep, dispatcher: DispatcherDep
) -> APIResponse[DiagnosticsResponse]:
    """Last accepted trigger, orphaned completions and unapplied moves."""
    snapshot = diagnostics.snapshot()
    return APIResponse(
        data=DiagnosticsResponse(**snapshot, active_runs=dispatcher.active_run_ids)
    )
