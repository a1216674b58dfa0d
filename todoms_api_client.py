"""
Todoms API client.

Thin async HTTP layer over the todoms REST service. Every method returns an
ApiResponse; HTTP failures, timeouts and unreadable bodies are folded into
its ``error`` field instead of being raised.
"""

import logging
from typing import Any, Optional

import httpx

from todoms_config import HTTP_TIMEOUT, TODOMS_API_URL
from todoms_models import (
    ApiResponse,
    CreateTodoRequest,
    ErrorResponse,
    LoginRequest,
    RefreshTokenRequest,
    SignupRequest,
    UpdateTodoRequest,
    to_payload,
)

logger = logging.getLogger(__name__)

HTTP_ERROR_CODE = "http-error"
TIMEOUT_ERROR_CODE = "timeout"
NETWORK_ERROR_CODE = "network-error"
INVALID_RESPONSE_CODE = "invalid-response"


class TodomsApiClient:
    """Async client for the todoms REST API."""

    def __init__(
        self,
        base_url: str = TODOMS_API_URL,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Tests pass an httpx.MockTransport here
        self._transport = transport

    async def signup(self, request: SignupRequest) -> ApiResponse:
        return await self._request("POST", "/auth/signup", json=to_payload(request))

    async def login(self, request: LoginRequest) -> ApiResponse:
        return await self._request("POST", "/auth/login", json=to_payload(request))

    async def refresh_token(self, request: RefreshTokenRequest) -> ApiResponse:
        return await self._request("POST", "/auth/refresh", json=to_payload(request))

    async def get_current_user(self, access_token: str) -> ApiResponse:
        return await self._request("GET", "/auth/me", access_token=access_token)

    async def get_all_todos(self, access_token: str) -> ApiResponse:
        return await self._request("GET", "/todos", access_token=access_token)

    async def get_todo(self, access_token: str, todo_id: str) -> ApiResponse:
        return await self._request("GET", f"/todos/{todo_id}", access_token=access_token)

    async def create_todo(self, access_token: str, request: CreateTodoRequest) -> ApiResponse:
        return await self._request("POST", "/todos", access_token=access_token, json=to_payload(request))

    async def update_todo(self, access_token: str, todo_id: str, request: UpdateTodoRequest) -> ApiResponse:
        return await self._request(
            "PUT", f"/todos/{todo_id}", access_token=access_token, json=to_payload(request)
        )

    async def delete_todo(self, access_token: str, todo_id: str) -> ApiResponse:
        return await self._request("DELETE", f"/todos/{todo_id}", access_token=access_token)

    async def _request(
        self,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """Send one request and normalize the outcome into an ApiResponse."""
        url = f"{self.base_url}{path}"
        logger.info(f"{method} {path} called")

        # Prepare headers
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"{method} {path} timed out after {self.timeout}s")
            return ApiResponse.failure(
                504,
                TIMEOUT_ERROR_CODE,
                f"Request timed out. The todoms API at {self.base_url} is not responding"
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            return ApiResponse.failure(
                503,
                NETWORK_ERROR_CODE,
                f"Could not reach the todoms API at {self.base_url}: {str(e)}"
            )

        return self._to_api_response(method, path, response)

    def _to_api_response(self, method: str, path: str, response: httpx.Response) -> ApiResponse:
        if response.is_success:
            if response.status_code == 204 or not response.content:
                return ApiResponse(data=None, status_code=response.status_code)
            try:
                return ApiResponse(data=response.json(), status_code=response.status_code)
            except ValueError:
                logger.error(f"{method} {path} returned a body that is not JSON")
                return ApiResponse.failure(
                    502,
                    INVALID_RESPONSE_CODE,
                    f"The todoms API returned an unreadable response (HTTP {response.status_code})"
                )

        logger.error(f"{method} {path} failed - HTTP {response.status_code}")
        return ApiResponse(
            data=None,
            status_code=response.status_code,
            error=self._extract_error(response),
        )

    @staticmethod
    def _extract_error(response: httpx.Response) -> ErrorResponse:
        """Use the service's own {code, message} body when it sends one."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return ErrorResponse(
                code=str(body.get("code") or HTTP_ERROR_CODE),
                message=body["message"],
            )

        detail = response.text.strip() or response.reason_phrase
        return ErrorResponse(
            code=HTTP_ERROR_CODE,
            message=f"HTTP {response.status_code}: {detail}",
        )
