"""Submission client: Protocol + httpx implementation + mock backend."""

from __future__ import annotations

import logging
import random
from typing import Mapping, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from frontdoor_agent.config.models import TeamDefinition

logger = logging.getLogger(__name__)


class SubmissionResult(BaseModel):
    """Outcome of handing a request to the ticketing backend."""

    success: bool
    tracking_url: str | None = None
    item_id: str | None = None
    error: str | None = Field(default=None, description="Backend error text when success is false")


@runtime_checkable
class SubmissionClient(Protocol):
    """Protocol for submitting a completed request to a team's ticket list."""

    async def submit(self, team: TeamDefinition, fields: Mapping[str, str]) -> SubmissionResult:
        """Submit. Backend failures are reported in the result, not raised."""
        ...


class HttpSubmissionClient:
    """POSTs the request as JSON to the team's endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def submit(self, team: TeamDefinition, fields: Mapping[str, str]) -> SubmissionResult:
        payload = {"team_id": team.id, "team_name": team.name, "list_title": team.list_title, "fields": dict(fields)}
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        logger.info("Submitting request to team %s", team.id)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(f"{team.endpoint.rstrip('/')}/items", json=payload, headers=headers or None)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Submission to %s rejected: %s", team.id, e.response.status_code)
            return SubmissionResult(success=False, error=f"The ticketing system returned {e.response.status_code}.")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Submission to %s failed: %s", team.id, e)
            return SubmissionResult(success=False, error=f"Could not reach the ticketing system ({e}).")

        url = data.get("item_url")
        if not url:
            return SubmissionResult(success=False, error="The ticketing system did not return a tracking link.")
        item_id = data.get("id")
        return SubmissionResult(success=True, tracking_url=url, item_id=str(item_id) if item_id is not None else None)


class MockSubmissionClient:
    """
    Stand-in backend. Succeeds with a generated tracking URL unless
    ``fail_with`` is set; records every submission for inspection.
    """

    def __init__(
        self,
        url_template: str = "{endpoint}/Lists/DemandRequests/Item/{item_id}",
        fail_with: str | None = None,
    ) -> None:
        self._url_template = url_template
        self.fail_with = fail_with
        self.submissions: list[tuple[str, dict[str, str]]] = []

    async def submit(self, team: TeamDefinition, fields: Mapping[str, str]) -> SubmissionResult:
        self.submissions.append((team.id, dict(fields)))
        if self.fail_with is not None:
            return SubmissionResult(success=False, error=self.fail_with)
        item_id = str(random.randint(1, 9999))
        url = self._url_template.format(endpoint=team.endpoint.rstrip("/"), item_id=item_id, team_id=team.id)
        logger.info("Mock submission for team %s: %s", team.id, url)
        return SubmissionResult(success=True, tracking_url=url, item_id=item_id)
