"""Todoms MCP server - tests for server wiring, startup login and logging setup."""

import logging
import os
import time

import pytest
from mcp import types
from unittest.mock import AsyncMock

from todoms_config import cleanup_old_logs, setup_logging
from todoms_mcp_server import create_server, login_from_env
from todoms_models import ApiResponse
from todoms_repository import TodomsRepository


def test_create_server_registers_tool_handlers():
    server = create_server(AsyncMock(spec=TodomsRepository))

    assert server.name == "todoms"
    assert types.ListToolsRequest in server.request_handlers
    assert types.CallToolRequest in server.request_handlers


async def _call_tool(server, name, arguments):
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    result = await handler(request)
    return result.root


@pytest.mark.asyncio
async def test_call_tool_reports_unexpected_exceptions():
    repository = AsyncMock(spec=TodomsRepository)
    repository.get_all_todos.side_effect = RuntimeError("boom")
    server = create_server(repository)

    result = await _call_tool(server, "get_all_todos", {})

    assert [item.text for item in result.content] == ["Error: Tool execution failed: boom"]
    repository.get_all_todos.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_call_tool_routes_to_repository():
    repository = AsyncMock(spec=TodomsRepository)
    repository.get_todo.return_value = ApiResponse.failure(404, "not-found", "Todo not found")
    server = create_server(repository)

    result = await _call_tool(server, "get_todo", {"todoId": "7"})

    assert [item.text for item in result.content] == ["Error: Todo not found"]
    repository.get_todo.assert_awaited_once_with("7")


@pytest.mark.asyncio
async def test_call_tool_with_unknown_name_is_an_error_result():
    repository = AsyncMock(spec=TodomsRepository)
    server = create_server(repository)

    result = await _call_tool(server, "nope", {})

    assert result.isError is True
    assert "Unknown tool: nope" in result.content[0].text
    assert repository.mock_calls == []


def test_servers_do_not_share_repositories():
    first = AsyncMock(spec=TodomsRepository)
    second = AsyncMock(spec=TodomsRepository)

    assert create_server(first) is not create_server(second)


@pytest.mark.asyncio
async def test_login_from_env_without_credentials():
    repository = AsyncMock(spec=TodomsRepository)

    assert await login_from_env(repository, email=None, password=None) is False
    repository.login.assert_not_called()


@pytest.mark.asyncio
async def test_login_from_env_success():
    repository = AsyncMock(spec=TodomsRepository)
    repository.login.return_value = ApiResponse(
        data={"access_token": "a", "refresh_token": "r"}, status_code=200
    )

    assert await login_from_env(repository, email="user@example.com", password="secret") is True
    request = repository.login.await_args.args[0]
    assert request.email == "user@example.com"


@pytest.mark.asyncio
async def test_login_from_env_failure_is_not_fatal():
    repository = AsyncMock(spec=TodomsRepository)
    repository.login.return_value = ApiResponse.failure(503, "network-error", "Could not reach the todoms API")

    assert await login_from_env(repository, email="user@example.com", password="secret") is False


@pytest.mark.asyncio
async def test_login_from_env_with_invalid_email():
    repository = AsyncMock(spec=TodomsRepository)

    assert await login_from_env(repository, email="nobody", password="secret") is False
    repository.login.assert_not_called()


def test_cleanup_old_logs_removes_only_expired(tmp_path):
    old_log = tmp_path / "old.log"
    new_log = tmp_path / "new.log"
    other = tmp_path / "notes.txt"
    for path in (old_log, new_log, other):
        path.write_text("x")
    two_days_ago = time.time() - 2 * 24 * 60 * 60
    os.utime(old_log, (two_days_ago, two_days_ago))
    os.utime(other, (two_days_ago, two_days_ago))

    assert cleanup_old_logs(tmp_path, days_old=1) == 1
    assert not old_log.exists()
    assert new_log.exists()
    assert other.exists()


def test_cleanup_old_logs_zero_days_removes_all(tmp_path):
    (tmp_path / "a.log").write_text("x")
    (tmp_path / "b.log").write_text("x")

    assert cleanup_old_logs(tmp_path, days_old=0) == 2
    assert list(tmp_path.glob("*.log")) == []


def test_cleanup_old_logs_missing_directory(tmp_path):
    assert cleanup_old_logs(tmp_path / "missing") == 0


def test_setup_logging_creates_log_file(tmp_path):
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers = []
    try:
        log_file = setup_logging(log_dir=str(tmp_path / "logs"), retention_days=30, level="DEBUG")
        logging.getLogger("todoms_test").info("hello")
        for handler in root.handlers:
            handler.flush()

        assert log_file.startswith(str(tmp_path / "logs"))
        with open(log_file) as f:
            assert "INFO - hello" in f.read()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
