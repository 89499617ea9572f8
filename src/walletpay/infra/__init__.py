"""
Infrastructure package.

This package contains logging configuration and the HTTP request sender.
"""

from walletpay.infra.logging_cfg import AsyncQueueHandler, JsonFormatter, build_logger, log_event
from walletpay.infra.request_sender import HttpRequestSender, to_form_urlencoded

__all__ = [
    "AsyncQueueHandler",
    "JsonFormatter",
    "build_logger",
    "log_event",
    "HttpRequestSender",
    "to_form_urlencoded",
]
