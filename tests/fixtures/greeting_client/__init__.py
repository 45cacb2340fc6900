"""Hand-written stand-in for a generated restJson1 client.

Serializes requests and deserializes responses the way a generated client
would, sending everything through a pluggable ``httpx`` transport.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

import httpx

from . import models

_ERRORS = {
    "ResourceNotFound": models.ResourceNotFound,
    "InvalidRequest": models.InvalidRequest,
}


class GreetingServiceClient:
    """Async client for ``example.greeting#GreetingService``."""

    def __init__(
        self,
        endpoint: str = "https://example.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._transport = transport

    async def greeting_operation(
        self, operation_input: models.GreetingOperationInput
    ) -> models.GreetingOperationOutput:
        body: dict[str, Any] = {}
        if operation_input.name is not None:
            body["name"] = operation_input.name
        request = httpx.Request(
            "POST",
            f"{self._endpoint}/greet",
            headers={"Content-Type": "application/json"},
            content=json.dumps(body).encode("utf-8"),
        )
        data = await self._send(request)
        return models.GreetingOperationOutput(greeting=data.get("greeting"))

    async def get_resource(
        self, operation_input: models.GetResourceInput
    ) -> models.GetResourceOutput:
        params = {}
        if operation_input.verbose is not None:
            params["verbose"] = "true" if operation_input.verbose else "false"
        headers = {}
        if operation_input.request_id is not None:
            headers["X-Request-Id"] = operation_input.request_id
        request = httpx.Request(
            "GET",
            f"{self._endpoint}/resources/{quote(operation_input.id or '', safe='')}",
            params=params,
            headers=headers,
        )
        data = await self._send(request)
        created_at = data.get("createdAt")
        return models.GetResourceOutput(
            id=data.get("id"),
            created_at=(
                datetime.fromtimestamp(created_at, tz=timezone.utc)
                if created_at is not None
                else None
            ),
            size=data.get("size"),
            tags=data.get("tags"),
        )

    async def _send(self, request: httpx.Request) -> dict[str, Any]:
        async with httpx.AsyncClient(transport=self._transport) as http:
            response = await http.send(request)
        data = response.json() if response.content else {}
        if response.status_code >= 300:
            raise self._error(response, data)
        return data

    @staticmethod
    def _error(response: httpx.Response, data: dict[str, Any]) -> Exception:
        code = response.headers.get("X-Amzn-Errortype") or data.get("__type", "")
        error_type = _ERRORS.get(code.split(":")[0])
        if error_type is None:
            return models.ServiceError(response.status_code, code)
        return error_type(message=data.get("message"))
