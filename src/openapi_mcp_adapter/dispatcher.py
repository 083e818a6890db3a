"""HTTP execution of bound request plans."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .auth import TokenResolver
from .errors import ApiError, SerializationError
from .models import RequestPlan

logger = logging.getLogger(__name__)


class RequestDispatcher:
    def __init__(
        self,
        base_url: str,
        token_resolver: TokenResolver,
        user_agent: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_resolver = token_resolver
        self.user_agent = user_agent
        self.transport = transport

    async def dispatch(self, plan: RequestPlan) -> Any:
        token = self.token_resolver.resolve()
        method = plan.method.upper()
        url = self._build_url(plan.endpoint)
        headers = self._headers(token)
        query = self._build_query(plan.query_params)

        content: Optional[str] = None
        if method != "GET" and plan.body_params:
            content = json.dumps(plan.body_params)

        logger.info("API Request: %s %s", method, url)

        try:
            # No timeout: the call runs until the upstream settles.
            async with httpx.AsyncClient(timeout=None, transport=self.transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    params=query,
                    content=content,
                )
        except httpx.HTTPError as exc:
            raise ApiError(0, "", f"Request to {url} failed: {exc}") from exc

        logger.debug("API Response: %s %s -> %s", method, url, response.status_code)

        if not response.is_success:
            raise ApiError(response.status_code, response.text)
        return self._parse(response)

    def _build_url(self, endpoint: str) -> str:
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        return self.base_url + endpoint

    def _build_query(self, query_params: Dict[str, Any]) -> Dict[str, Any]:
        # Lists are exploded by httpx: tags=a&tags=b.
        query: Dict[str, Any] = {}
        for key, value in query_params.items():
            if value is None:
                continue
            if isinstance(value, dict):
                query[key] = json.dumps(value)
            else:
                query[key] = value
        return query

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def _parse(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response.text
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise SerializationError(
                f"Invalid JSON in response from {response.request.url}: {exc}"
            ) from exc
