"""Tests for cron request authentication."""

import pytest
from src.services.cron_auth import verify_cron_token, verify_cron_request, get_header, get_cron_secret
from src.utils.errors import CronAuthError


@pytest.mark.unit
def test_verify_cron_token():
    assert verify_cron_token("s3cret", "Bearer s3cret") is True
    assert verify_cron_token("s3cret", "bearer s3cret") is True
    assert verify_cron_token("s3cret", "Bearer wrong") is False
    assert verify_cron_token("s3cret", "Basic s3cret") is False
    assert verify_cron_token("s3cret", "Bearer") is False
    assert verify_cron_token("s3cret", "") is False
    assert verify_cron_token("", "Bearer ") is False


@pytest.mark.unit
def test_get_header_is_case_insensitive():
    headers = {"Authorization": "Bearer x", "user-agent": "vercel-cron/1.0"}
    assert get_header(headers, "authorization") == "Bearer x"
    assert get_header(headers, "User-Agent") == "vercel-cron/1.0"
    assert get_header(headers, "x-missing") == ""
    assert get_header(None, "authorization") == ""


@pytest.mark.unit
def test_verify_cron_request(mock_vercel_request):
    assert verify_cron_request(mock_vercel_request["headers"]) is True
    assert verify_cron_request({"authorization": "Bearer nope"}) is False
    assert verify_cron_request({}) is False


@pytest.mark.unit
def test_missing_secret_rejects(monkeypatch):
    monkeypatch.delenv("CRON_SECRET", raising=False)

    with pytest.raises(CronAuthError):
        get_cron_secret()
    assert verify_cron_request({"authorization": "Bearer "}) is False


@pytest.mark.unit
def test_bypass_in_development(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    assert verify_cron_request({}) is True


@pytest.mark.unit
def test_bypass_flag(monkeypatch):
    monkeypatch.setenv("CRON_BYPASS_AUTH", "true")
    assert verify_cron_request({}) is True
