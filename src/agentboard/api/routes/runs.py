"""Run query and cancellation endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from agentboard.api.dependencies import DispatcherDep
from agentboard.api.models import APIResponse, RunResponse, run_to_response

router = APIRouter(prefix="/runs", tags=["runs"])


def _run_not_found(run_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=APIResponse[None](data=None, error=f"Run {run_id} is not in flight").model_dump(),
    )


@router.get("", response_model=APIResponse[list[RunResponse]])
def list_runs(dispatcher: DispatcherDep) -> APIResponse[list[RunResponse]]:
    """List in-flight runs."""
    runs = dispatcher.orchestrator.active_runs
    return APIResponse(data=[run_to_response(r) for r in runs])


@router.get("/{run_id}", response_model=APIResponse[RunResponse])
def get_run(run_id: str, dispatcher: DispatcherDep) -> APIResponse[RunResponse] | JSONResponse:
    """Get an in-flight run. Finished runs live on in their conversation."""
    run = dispatcher.orchestrator.get_run(run_id)
    if run is None:
        return _run_not_found(run_id)
    return APIResponse(data=run_to_response(run))


@router.delete(
    "/{run_id}",
    response_model=APIResponse[dict[str, str]],
    status_code=status.HTTP_202_ACCEPTED,
)
async def cancel_run(
    run_id: str, dispatcher: DispatcherDep
) -> APIResponse[dict[str, str]] | JSONResponse:
    """Stop waiting for a run. The agent itself is not stopped."""
    if not dispatcher.cancel(run_id):
        return _run_not_found(run_id)
    return APIResponse(data={"run_id": run_id, "status": "cancelling"})
