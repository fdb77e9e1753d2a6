"""Tests for structlog setup and per-request log context."""

import logging

import structlog

from crypto_tracker.logging import bind_request_context, setup_logging


def test_setup_installs_single_handler() -> None:
    setup_logging("INFO")
    setup_logging("INFO")

    assert len(logging.getLogger().handlers) == 1
    assert logging.getLogger().level == logging.INFO


def test_httpx_quiet_unless_debugging() -> None:
    setup_logging("INFO", "json")
    assert logging.getLogger("httpx").level == logging.WARNING

    setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_bind_request_context_replaces_previous_fields() -> None:
    bind_request_context(session_id="abc", coin_id="bitcoin")
    bind_request_context(session_id="def")

    assert structlog.contextvars.get_contextvars() == {"session_id": "def"}
    structlog.contextvars.clear_contextvars()
