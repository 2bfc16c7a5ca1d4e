#!/usr/bin/env python3
"""
Test script for logging utilities.

This validates that the centralized logging and error classification works
correctly.
"""

import logging

import httpx
import pytest
from pydantic import ValidationError

from chat_gpt_lib.llm.exceptions import (
    APIError,
    ConfigurationError,
    FramingError,
    PayloadDecodeError,
)
from chat_gpt_lib.logging_utils import (
    classify_error,
    configure_logging,
    log_operation,
    operation_context,
)


class TestClassifyError:
    """Test error classification."""

    def test_classify_api_error(self):
        assert classify_error(APIError("bad request", status_code=400)) == "api_error"

    def test_classify_streaming_errors(self):
        assert classify_error(FramingError("truncated")) == "streaming_error"
        assert classify_error(PayloadDecodeError("bad json")) == "streaming_error"

    def test_classify_configuration_error(self):
        assert classify_error(ConfigurationError("no key")) == "configuration_error"

    def test_classify_validation_error(self):
        validation_error = ValidationError.from_exception_data(
            "ValidationError", [{"type": "missing", "loc": ("field",), "input": {}}]
        )
        assert classify_error(validation_error) == "validation_error"

    def test_classify_timeout_error(self):
        assert classify_error(TimeoutError("Connection timed out")) == "timeout_error"
        assert classify_error(httpx.ReadTimeout("slow")) == "timeout_error"

    def test_classify_connection_error(self):
        assert classify_error(httpx.ConnectError("refused")) == "connection_error"
        assert classify_error(OSError("Network unreachable")) == "connection_error"

    def test_classify_value_error(self):
        assert classify_error(ValueError("Invalid parameter")) == "parameter_error"

    def test_classify_unknown_error(self):
        assert classify_error(RuntimeError("Unknown error")) == "unknown_error"


class TestDecorators:
    """Test logging decorators and context managers."""

    @pytest.mark.asyncio
    async def test_log_operation_success(self):
        """Test log_operation decorator with successful function."""

        @log_operation("test_operation", log_timing=True, log_result=True)
        async def successful_function():
            return "success"

        assert await successful_function() == "success"

    @pytest.mark.asyncio
    async def test_log_operation_with_error(self):
        """Test log_operation decorator with function that raises error."""

        @log_operation("test_operation", log_args=True)
        async def failing_function(value):
            raise ValueError(f"Test error {value}")

        with pytest.raises(ValueError, match="Test error 3"):
            await failing_function(3)

    @pytest.mark.asyncio
    async def test_operation_context_success(self):
        async with operation_context("test_operation", context={"model": "m"}) as op_logger:
            op_logger.info("inside")

    @pytest.mark.asyncio
    async def test_operation_context_reraises(self):
        with pytest.raises(APIError):
            async with operation_context("test_operation"):
                raise APIError("boom")


class TestConfigureLogging:
    """Test log level configuration."""

    def test_named_level(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        configure_logging("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_numeric_level(self):
        configure_logging(logging.WARNING)
        assert logging.getLogger().level == logging.WARNING
        configure_logging("INFO")

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown logging level"):
            configure_logging("chatty")
