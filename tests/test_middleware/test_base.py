"""Tests for the base middleware."""

import logging
from unittest.mock import MagicMock, patch

from fastmcp.server.middleware import Middleware

from labcoat.middleware.base import LabcoatMiddleware


def test_is_fastmcp_middleware() -> None:
    assert isinstance(LabcoatMiddleware(), Middleware)


def test_default_logger() -> None:
    assert isinstance(LabcoatMiddleware().logger, logging.Logger)


def test_custom_logger() -> None:
    mock_logger = MagicMock()
    assert LabcoatMiddleware(logger=mock_logger).logger is mock_logger


def test_elapsed_ms() -> None:
    with patch("labcoat.middleware.base.time.perf_counter", return_value=1.25):
        assert LabcoatMiddleware.elapsed_ms(1.0) == 250.0
