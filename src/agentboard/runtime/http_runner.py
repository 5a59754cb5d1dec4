"""HttpJobRunner - JobRunner backed by the cloud agent HTTP API."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

import httpx

from agentboard.logging import get_logger, sanitize_for_log, truncate_output
from agentboard.runtime.exceptions import LaunchError, PollError
from agentboard.runtime.models import JobHandle, JobStatus, JobUpdate
from agentboard.runtime.payload import last_assistant_message, normalize_status_payload

if TYPE_CHECKING:
    from agentboard.runtime.models import JobSpec

logger = get_logger("runtime")

DEFAULT_BASE_URL = "https://api.cursor.com"

# Statuses worth another poll
RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def human_readable_error(status_code: int, detail: str = "") -> str:
    """Turn an HTTP error from the agent runtime into an operator-readable message.

    The runtime's own detail text is kept verbatim.
    """
    if status_code == 401:
        message = "Agent runtime authentication failed. Check that the API key is valid."
    elif status_code == 403:
        message = "Agent runtime access denied. Your plan may not include the cloud agents API."
    elif status_code == 404:
        message = "Agent runtime could not find the requested agent or repository (404)."
    elif status_code == 429:
        message = "Agent runtime rate limit exceeded. Please try again in a moment."
    elif status_code >= 500:
        message = f"Agent runtime server error ({status_code}). Please try again later."
    else:
        message = f"Agent runtime request failed ({status_code})."
    detail = detail.strip()
    return f"{message} Detail: {detail}" if detail else message


class HttpJobRunner:
    """JobRunner for the cloud agent HTTP API.

    Launches with ``POST /v0/agents`` and polls ``GET /v0/agents/{id}``. When a
    finished agent reports only a placeholder summary, the report is taken
    from the last assistant message of ``GET /v0/agents/{id}/conversation``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        repository_url: str = "",
        default_branch: str = "main",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the runner.

        Args:
            base_url: Base URL of the agent runtime.
            api_key: API key, sent as basic auth user name.
            repository_url: Repository jobs work against.
            default_branch: Branch used when a spec names no source ref.
            client: HTTP client to use (tests pass one with a mock transport).
            timeout: Request timeout in seconds for a client created here.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.repository_url = repository_url
        self.default_branch = default_branch
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this runner created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        token = base64.b64encode(f"{self.api_key}:".encode()).decode()
        return {"Authorization": f"Basic {token}", "Content-Type": "application/json"}

    async def launch(self, spec: JobSpec) -> JobHandle:
        """Launch an agent for a job spec.

        Raises:
            LaunchError: If the runner is not configured, the runtime cannot
                be reached, or the runtime rejects the job.
        """
        if not self.api_key:
            raise LaunchError(
                "Agent runtime API key is not configured. "
                "Set AGENTBOARD_RUNTIME_API_KEY (or CURSOR_API_KEY)."
            )
        if not self.repository_url:
            raise LaunchError(
                "No repository is configured for agent runs. Set AGENTBOARD_REPOSITORY_URL."
            )

        body: dict[str, Any] = {
            "prompt": {"text": spec.instructions},
            "source": {
                "repository": self.repository_url,
                "ref": spec.source_ref or self.default_branch,
            },
        }
        if spec.target_branch:
            body["target"] = {"branchName": spec.target_branch}

        logger.info("Launching %s job for ticket %s", spec.agent_kind, spec.ticket_id)
        try:
            response = await self.client.post(
                f"{self.base_url}/v0/agents", json=body, headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise LaunchError(f"Could not reach the agent runtime: {e}") from e

        if response.is_error:
            logger.warning(
                "Launch rejected (%d): %s",
                response.status_code,
                truncate_output(sanitize_for_log(response.text)),
            )
            raise LaunchError(self._launch_error_message(response, spec))

        try:
            data = response.json()
        except ValueError as e:
            raise LaunchError("Invalid response from agent runtime when launching agent.") from e

        job_id = data.get("id") if isinstance(data, dict) else None
        if not job_id:
            raise LaunchError("Agent runtime did not return an agent ID.")
        logger.info("Launched job %s for ticket %s", job_id, spec.ticket_id)
        return JobHandle(job_id=str(job_id), status=str(data.get("status") or "CREATING"))

    def _launch_error_message(self, response: httpx.Response, spec: JobSpec) -> str:
        text = response.text
        lowered = text.lower()
        if response.status_code == 400 and "branch" in lowered and "does not exist" in lowered:
            ref = spec.source_ref or self.default_branch
            return (
                f'The repository has no "{ref}" branch yet. If the repository is new and '
                "empty, push an initial commit so the branch exists, then try again. "
                f"Detail: {text.strip()}"
            )
        return human_readable_error(response.status_code, text)

    async def poll(self, handle: JobHandle) -> JobUpdate:
        """Poll an agent once.

        Raises:
            PollError: If the runtime cannot be reached, answers with a
                retryable status, or returns a body that is not JSON.
        """
        url = f"{self.base_url}/v0/agents/{handle.job_id}"
        try:
            response = await self.client.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise PollError(f"Could not reach the agent runtime: {e}") from e

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise PollError(human_readable_error(response.status_code, response.text))
        if response.is_error:
            # Not transient; end the job with the runtime's explanation
            return JobUpdate(
                status=JobStatus.ERROR,
                final_text=human_readable_error(response.status_code, response.text),
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PollError("Invalid response when polling agent status.") from e
        if not isinstance(payload, dict):
            raise PollError("Invalid response when polling agent status.")

        update = normalize_status_payload(payload)
        if update.status is JobStatus.FINISHED and update.final_text is None:
            report = await self._conversation_report(handle)
            if report is not None:
                update = JobUpdate(
                    status=update.status,
                    final_text=report,
                    raw_status=update.raw_status,
                    metadata=update.metadata,
                )
        return update

    async def _conversation_report(self, handle: JobHandle) -> str | None:
        url = f"{self.base_url}/v0/agents/{handle.job_id}/conversation"
        try:
            response = await self.client.get(url, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not fetch conversation of job %s: %s", handle.job_id, e)
            return None
        return last_assistant_message(data) if isinstance(data, dict) else None
