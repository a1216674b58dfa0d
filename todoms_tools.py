"""
Todoms MCP tools.

Each tool validates its arguments with a pydantic input model, calls the
repository and turns the resulting ApiResponse into MCP text content.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from mcp.types import TextContent, Tool, ToolAnnotations
from pydantic import BaseModel, ValidationError

from todoms_config import CHARACTER_LIMIT
from todoms_models import (
    ApiResponse,
    CreateTodosRequest,
    EmptyInput,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    Todo,
    TodoIdInput,
    TodosResponse,
    UpdateTodoInput,
    UserResponse,
)
from todoms_repository import TodomsRepository

logger = logging.getLogger(__name__)

# A presenter yields a single text or a list of texts, one content item each
Presentation = Union[str, list[str]]
ToolHandler = Callable[[TodomsRepository, Any], Awaitable[list[TextContent]]]


class UnknownToolError(ValueError):
    """Raised for a tool name that is not in TOOL_HANDLERS"""


# Utility functions for response formatting
def truncate_response(text: str, limit: int = CHARACTER_LIMIT) -> str:
    """Truncate response if it exceeds character limit"""
    if len(text) <= limit:
        return text

    truncated = text[:limit - 100]  # Leave room for truncation message
    return f"{truncated}\n\n... [Response truncated. Original length: {len(text)} characters, showing first {limit - 100} characters]"


def text_content(text: str) -> TextContent:
    return TextContent(type="text", text=truncate_response(text))


def create_response(response: ApiResponse, creator: Callable[[Any], Presentation]) -> list[TextContent]:
    """Map an ApiResponse to tool output: its error message, or the creator's texts."""
    if response.error:
        return [text_content(f"Error: {response.error.message}")]

    presentation = creator(response.data)
    if isinstance(presentation, str):
        presentation = [presentation]
    return [text_content(text) for text in presentation]


def format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


# Tool handlers
async def signup(repository: TodomsRepository, request: SignupRequest) -> list[TextContent]:
    response = await repository.signup(request)

    def present(data: SignupResponse) -> str:
        return f"Successfully registered user: {data['email']} (ID: {data['id']})"

    return create_response(response, present)


async def login(repository: TodomsRepository, request: LoginRequest) -> list[TextContent]:
    response = await repository.login(request)
    return create_response(response, lambda data: "Successfully logged in. Access token received.")


async def logout(repository: TodomsRepository, request: EmptyInput) -> list[TextContent]:
    repository.logout()
    return [text_content("Successfully logged out.")]


async def refresh_token(repository: TodomsRepository, request: EmptyInput) -> list[TextContent]:
    response = await repository.refresh_token_if_needed()
    if response is None:
        return [text_content("No refresh token available. Please login first.")]
    return create_response(response, lambda data: "Successfully refreshed access token.")


async def get_current_user(repository: TodomsRepository, request: EmptyInput) -> list[TextContent]:
    response = await repository.get_current_user()

    def present(data: UserResponse) -> str:
        return f"Logged in as {data['email']} (ID: {data['id']})"

    return create_response(response, present)


async def get_all_todos(repository: TodomsRepository, request: EmptyInput) -> list[TextContent]:
    response = await repository.get_all_todos()

    def present(data: TodosResponse) -> str:
        return json.dumps(data["todos"], indent=2, ensure_ascii=False)

    return create_response(response, present)


async def get_todo(repository: TodomsRepository, request: TodoIdInput) -> list[TextContent]:
    response = await repository.get_todo(request.todo_id)
    return create_response(response, lambda data: json.dumps(data, indent=2, ensure_ascii=False))


async def create_todos(repository: TodomsRepository, request: CreateTodosRequest) -> list[TextContent]:
    response = await repository.create_todos(request)

    def present(data: TodosResponse) -> list[str]:
        return [f"Created todo: {todo['title']} (ID: {todo['id']})" for todo in data["todos"]]

    return create_response(response, present)


async def update_todo(repository: TodomsRepository, request: UpdateTodoInput) -> list[TextContent]:
    response = await repository.update_todo(request.todo_id, request.todo_data)

    def present(data: Todo) -> str:
        return f"Updated todo: {data['title']} (ID: {data['id']})"

    return create_response(response, present)


async def delete_todo(repository: TodomsRepository, request: TodoIdInput) -> list[TextContent]:
    response = await repository.delete_todo(request.todo_id)
    return create_response(response, lambda data: f"Todo with ID {request.todo_id} has been deleted.")


# Tool name -> (input model, handler)
TOOL_HANDLERS: dict[str, tuple[type[BaseModel], ToolHandler]] = {
    "signup": (SignupRequest, signup),
    "login": (LoginRequest, login),
    "logout": (EmptyInput, logout),
    "refresh_token": (EmptyInput, refresh_token),
    "get_current_user": (EmptyInput, get_current_user),
    "get_all_todos": (EmptyInput, get_all_todos),
    "get_todo": (TodoIdInput, get_todo),
    "create_todos": (CreateTodosRequest, create_todos),
    "update_todo": (UpdateTodoInput, update_todo),
    "delete_todo": (TodoIdInput, delete_todo),
}

# Tool name -> (description, readOnly, destructive, idempotent)
TOOL_DESCRIPTIONS = {
    "signup": ("Create a new user account", False, False, False),
    "login": ("Login to the todoms system", False, False, True),
    "logout": ("Logout from the todoms system", False, False, True),
    "refresh_token": ("Refresh the access token using the stored refresh token", False, False, False),
    "get_current_user": ("Get the currently logged in user", True, False, True),
    "get_all_todos": ("Get all todo items", True, False, True),
    "get_todo": ("Get a specific todo item by ID", True, False, True),
    "create_todos": ("Create todo items", False, False, False),
    "update_todo": ("Update a specific todo item", False, False, True),
    "delete_todo": ("Delete a specific todo item", False, True, True),
}


def list_tools() -> list[Tool]:
    """Tool definitions advertised to the host, schemas taken from the input models."""
    tools = []
    for name, (input_model, _) in TOOL_HANDLERS.items():
        description, read_only, destructive, idempotent = TOOL_DESCRIPTIONS[name]
        tools.append(
            Tool(
                name=name,
                description=description,
                inputSchema=input_model.model_json_schema(by_alias=True),
                annotations=ToolAnnotations(
                    readOnlyHint=read_only,
                    destructiveHint=destructive,
                    idempotentHint=idempotent,
                    openWorldHint=True,
                ),
            )
        )
    return tools


async def dispatch_tool(
    repository: TodomsRepository,
    name: str,
    arguments: Optional[dict[str, Any]] = None,
) -> list[TextContent]:
    """Validate arguments for the named tool and run it against the repository."""
    entry = TOOL_HANDLERS.get(name)
    if entry is None:
        raise UnknownToolError(f"Unknown tool: {name}")

    input_model, handler = entry
    try:
        request = input_model.model_validate(arguments or {})
    except ValidationError as e:
        logger.warning(f"{name} called with invalid arguments: {e.error_count()} error(s)")
        return [text_content(f"Error: Invalid arguments for {name}: {format_validation_error(e)}")]

    logger.info(f"{name} called")
    return await handler(repository, request)
