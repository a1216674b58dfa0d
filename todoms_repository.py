"""
Session-aware repository over TodomsApiClient.

Holds the access/refresh token pair for one logical session, attaches the
access token to protected calls and refuses them with a 401 envelope until a
login or refresh has succeeded.
"""

import asyncio
import logging
from typing import Optional

from todoms_api_client import TodomsApiClient
from todoms_models import (
    ApiResponse,
    CreateTodoRequest,
    CreateTodosRequest,
    LoginRequest,
    RefreshTokenRequest,
    SignupRequest,
    UpdateTodoRequest,
    unauthenticated_response,
)

logger = logging.getLogger(__name__)


class TodomsRepository:
    """One authenticated session against the todoms API.

    Not safe for concurrent login/logout from several callers; the last
    writer wins.
    """

    def __init__(self, api_client: Optional[TodomsApiClient] = None):
        self.api_client = api_client or TodomsApiClient()
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None

    async def signup(self, request: SignupRequest) -> ApiResponse:
        return await self.api_client.signup(request)

    async def login(self, request: LoginRequest) -> ApiResponse:
        """Log in and keep the returned token pair on success."""
        response = await self.api_client.login(request)

        if response.data is not None:
            self._store_tokens(response.data)
            if self._access_token:
                logger.info("Successfully authenticated with todoms API")
            else:
                logger.warning("Login response carried no access token")
        else:
            logger.warning(f"Login failed: HTTP {response.status_code}")

        return response

    async def refresh_token_if_needed(self) -> Optional[ApiResponse]:
        """Rotate the token pair using the refresh token.

        Returns None, without calling the API, when no refresh token is held.
        """
        if not self._refresh_token:
            return None

        response = await self.api_client.refresh_token(
            RefreshTokenRequest(refresh_token=self._refresh_token)
        )

        if response.data is not None:
            self._store_tokens(response.data)
            logger.info("Access token refreshed")
        else:
            logger.warning(f"Token refresh failed: HTTP {response.status_code}")

        return response

    async def get_current_user(self) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.get_current_user(self._access_token)

    async def get_all_todos(self) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.get_all_todos(self._access_token)

    async def get_todo(self, todo_id: str) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.get_todo(self._access_token, todo_id)

    async def create_todo(self, request: CreateTodoRequest) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.create_todo(self._access_token, request)

    async def create_todos(self, request: CreateTodosRequest) -> ApiResponse:
        """Create several todos concurrently.

        All-or-nothing reporting: the first failure in input order is returned
        in place of the whole batch, and todos already created by the other
        calls are not rolled back.
        """
        if not self._access_token:
            return unauthenticated_response()

        access_token = self._access_token
        results = await asyncio.gather(
            *(self.api_client.create_todo(access_token, todo) for todo in request.todos)
        )

        for result in results:
            if result.error:
                logger.error(f"create_todos failed - {result.error.code}: {result.error.message}")
                return ApiResponse(data=None, status_code=result.status_code, error=result.error)

        todos = [result.data for result in results if result.data is not None]
        logger.info(f"create_todos created {len(todos)} todos")
        return ApiResponse(data={"todos": todos}, status_code=200)

    async def update_todo(self, todo_id: str, request: UpdateTodoRequest) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.update_todo(self._access_token, todo_id, request)

    async def delete_todo(self, todo_id: str) -> ApiResponse:
        if not self._access_token:
            return unauthenticated_response()

        return await self.api_client.delete_todo(self._access_token, todo_id)

    def logout(self) -> None:
        self._access_token = None
        self._refresh_token = None

    def is_authenticated(self) -> bool:
        return bool(self._access_token)

    def _store_tokens(self, data: dict) -> None:
        # A body without tokens leaves the session unauthenticated
        self._access_token = data.get("access_token")
        self._refresh_token = data.get("refresh_token")
