"""Normalization of configuration-phase failures."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from walletpay.errors import ConfigurationError, StandardError
from walletpay.infra import logging_cfg

log = logging.getLogger("walletpay")


class ErrorReporter:
    """
    Maps failures from the script loader or capability provider onto
    ConfigurationError so callers see one error shape whichever dependency
    failed.

    Only errors that are already normalized (StandardError) pass through;
    any other error, walletpay's own included, is wrapped with its message
    and chained as __cause__.
    """

    def __init__(self, log_event: Optional[Callable[..., None]] = None) -> None:
        self._log_event = log_event or self._default_log

    def _default_log(self, event: str, **kwargs: Any) -> None:
        logging_cfg.log_event(log, event, logging.ERROR, **kwargs)

    def normalize(self, error: BaseException, *, stage: str = "configure") -> StandardError:
        if isinstance(error, StandardError):
            normalized = error
        else:
            normalized = ConfigurationError(str(error))
            normalized.__cause__ = error
        self._log_event(
            "wallet_error_normalized",
            stage=stage,
            error_type=type(error).__name__,
            error=str(error),
        )
        return normalized

    def raise_normalized(self, error: BaseException, *, stage: str = "configure") -> None:
        """Always raises; never returns."""
        normalized = self.normalize(error, stage=stage)
        if normalized is error:
            raise normalized
        raise normalized from error
