"""
Todoms data models.

Request schemas are pydantic models; they validate tool input before anything
reaches the repository and are dumped by alias as request bodies. Response
payloads from the remote service are kept as plain dicts and only described
here with TypedDicts.
"""

from datetime import datetime
from typing import Any, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


CLIENT_ERROR_CODE = "client-error"
NO_ACCESS_TOKEN_MESSAGE = "No access token available. Please login first."


# Response payloads
class SignupResponse(TypedDict):
    id: str
    email: str


class UserResponse(TypedDict):
    id: str
    email: str


class TokenResponse(TypedDict):
    access_token: str
    refresh_token: str


class Todo(TypedDict):
    id: str
    title: str
    description: Optional[str]
    dueDate: Optional[str]
    isCompleted: bool
    createdAt: str
    updatedAt: str


class TodosResponse(TypedDict):
    todos: list[Todo]


# Result envelope
class ErrorResponse(BaseModel):
    """Machine-readable code plus a human-readable message"""
    code: str
    message: str


class ApiResponse(BaseModel):
    """Normalized result of every remote operation.

    ``data`` is None whenever ``error`` is set. A successful call normally
    carries data; a successful delete is the exception and carries neither.
    """
    data: Optional[Any] = None
    status_code: int
    error: Optional[ErrorResponse] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, status_code: int, code: str, message: str) -> "ApiResponse":
        return cls(data=None, status_code=status_code, error=ErrorResponse(code=code, message=message))


def unauthenticated_response() -> ApiResponse:
    """The 401 envelope returned for protected calls made before login."""
    return ApiResponse.failure(401, CLIENT_ERROR_CODE, NO_ACCESS_TOKEN_MESSAGE)


# Request schemas
class SignupRequest(BaseModel):
    """Input model for signup"""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., description="Email address of the new account")
    password: str = Field(..., min_length=6, description="Password (at least 6 characters)")


class LoginRequest(BaseModel):
    """Input model for login"""
    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")


class RefreshTokenRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    refresh_token: str


class CreateTodoRequest(BaseModel):
    """Input model for a single todo creation"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = Field(..., min_length=1, description="Todo title")
    description: Optional[str] = Field(None, description="Todo description")
    due_date: Optional[str] = Field(
        None,
        alias="dueDate",
        description="Due date/time in ISO format (e.g., '2024-12-25T10:00:00Z')"
    )

    @field_validator("due_date")
    @classmethod
    def validate_due_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        # UTC only, e.g. 2024-12-25T10:00:00Z; offsets and naive times are rejected
        if not value.endswith("Z") or "T" not in value:
            raise ValueError("dueDate must be a UTC ISO 8601 datetime ending in 'Z'")
        try:
            parsed = datetime.fromisoformat(value[:-1])
        except ValueError:
            parsed = None
        if parsed is None or parsed.tzinfo is not None:
            raise ValueError("dueDate must be a UTC ISO 8601 datetime ending in 'Z'")
        return value


class CreateTodosRequest(BaseModel):
    """Input model for create_todos"""
    model_config = ConfigDict(extra="forbid")

    todos: list[CreateTodoRequest] = Field(..., description="Todo items to create")


class UpdateTodoRequest(BaseModel):
    """Full replacement of a todo's editable fields"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = Field(..., min_length=1, description="Todo title")
    description: Optional[str] = Field(None, description="Todo description")
    due_date: Optional[str] = Field(None, alias="dueDate", description="Due date/time")
    is_completed: bool = Field(..., alias="isCompleted", description="Completion status")


# Tool-level inputs
class EmptyInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class TodoIdInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    todo_id: str = Field(..., alias="todoId", min_length=1, description="Todo ID")


class UpdateTodoInput(BaseModel):
    """Input model for update_todo"""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    todo_id: str = Field(..., alias="todoId", min_length=1, description="Todo ID to update")
    todo_data: UpdateTodoRequest = Field(..., alias="todoData", description="New values for the todo")


def to_payload(model: BaseModel) -> dict[str, Any]:
    """Request body for a model: wire (alias) names, unset optionals left out."""
    return model.model_dump(by_alias=True, exclude_none=True)
