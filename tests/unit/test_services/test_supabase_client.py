"""Tests for Supabase table helpers."""

import pytest
from unittest.mock import MagicMock, patch
from src.services import supabase_client
from src.services.supabase_client import (
    list_tasks,
    list_task_owners,
    get_task,
    update_task,
    list_profiles,
    get_profile,
)
from src.utils.errors import SupabaseError


def patched_client(mock_supabase_client):
    patcher = patch('src.services.supabase_client.SupabaseClient')
    mock_client_class = patcher.start()
    mock_client_class.return_value.__aenter__.return_value = mock_supabase_client
    mock_client_class.return_value.__aexit__.return_value = None
    return patcher


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_tasks_applies_filters(mock_supabase_client):
    query = mock_supabase_client.query
    query.execute.return_value = MagicMock(data=[{"id": "t1"}])
    patcher = patched_client(mock_supabase_client)
    try:
        rows = await list_tasks(user_id="u1", boards=["overdue"], is_completed=False, recurring_only=True)
    finally:
        patcher.stop()

    assert rows == [{"id": "t1"}]
    mock_supabase_client.table.assert_called_once_with("tasks")
    query.select.assert_called_once_with(supabase_client.TASK_COLUMNS)
    query.eq.assert_any_call("user_id", "u1")
    query.eq.assert_any_call("is_completed", False)
    query.in_.assert_called_once_with("origin_board", ["overdue"])
    query.neq.assert_called_once_with("recurrence_type", "none")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_tasks_without_filters(mock_supabase_client):
    patcher = patched_client(mock_supabase_client)
    try:
        rows = await list_tasks()
    finally:
        patcher.stop()

    assert rows == []
    mock_supabase_client.query.eq.assert_not_called()
    mock_supabase_client.query.in_.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_task_missing(mock_supabase_client):
    patcher = patched_client(mock_supabase_client)
    try:
        assert await get_task("missing") is None
    finally:
        patcher.stop()

    mock_supabase_client.query.eq.assert_called_once_with("id", "missing")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_task_returns_row(mock_supabase_client):
    query = mock_supabase_client.query
    query.execute.return_value = MagicMock(data=[{"id": "t1", "origin_board": "overdue"}])
    patcher = patched_client(mock_supabase_client)
    try:
        row = await update_task("t1", {"origin_board": "overdue"})
    finally:
        patcher.stop()

    assert row["origin_board"] == "overdue"
    query.update.assert_called_once_with({"origin_board": "overdue"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_task_not_found(mock_supabase_client):
    patcher = patched_client(mock_supabase_client)
    try:
        with pytest.raises(SupabaseError, match="Task not found"):
            await update_task("gone", {"is_completed": False})
    finally:
        patcher.stop()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_query_errors_are_wrapped(mock_supabase_client):
    mock_supabase_client.query.execute.side_effect = RuntimeError("connection reset")
    patcher = patched_client(mock_supabase_client)
    try:
        with pytest.raises(SupabaseError, match="Failed to list profiles"):
            await list_profiles()
    finally:
        patcher.stop()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_profile(mock_supabase_client):
    mock_supabase_client.query.execute.return_value = MagicMock(
        data=[{"id": "u1", "timezone": "Europe/Lisbon"}]
    )
    patcher = patched_client(mock_supabase_client)
    try:
        profile = await get_profile("u1")
    finally:
        patcher.stop()

    assert profile == {"id": "u1", "timezone": "Europe/Lisbon"}
    mock_supabase_client.table.assert_called_once_with("profiles")


@pytest.mark.unit
def test_client_requires_credentials(monkeypatch):
    monkeypatch.setattr(supabase_client, "_client", None)
    monkeypatch.delenv("SUPABASE_URL", raising=False)

    with pytest.raises(SupabaseError):
        supabase_client.get_supabase_client()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_task_owners_is_distinct(mock_supabase_client):
    query = mock_supabase_client.query
    query.execute.return_value = MagicMock(data=[
        {"user_id": "u1"}, {"user_id": "u2"}, {"user_id": "u1"}, {"user_id": None},
    ])
    patcher = patched_client(mock_supabase_client)
    try:
        owners = await list_task_owners(recurring_only=True)
    finally:
        patcher.stop()

    assert owners == ["u1", "u2"]
    query.select.assert_called_once_with("user_id")
    query.neq.assert_called_once_with("recurrence_type", "none")
