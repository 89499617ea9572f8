"""
Environment-driven configuration with validation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from walletpay.infra import logging_cfg

load_dotenv()

log = logging.getLogger("walletpay")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def env_bool(key: str, default: bool) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    base_url: str
    checkout_path: str
    provider_tag: str
    http_timeout: float
    interaction_queue: str
    log_level: str
    log_file: str | None
    metrics_enabled: bool

    def dump(self) -> dict:
        """Return a dict of settings for sanity checks/logging."""
        return self.__dict__.copy()

    @classmethod
    def defaults(cls) -> "Settings":
        """Settings used when the host does not load them from the environment."""
        return cls(
            base_url="http://localhost",
            checkout_path="/checkout.php",
            provider_tag="walletpay",
            http_timeout=10.0,
            interaction_queue="widgetInteraction",
            log_level="INFO",
            log_file=None,
            metrics_enabled=True,
        )

    @classmethod
    def load(cls) -> "Settings":
        def _float_env(key: str, default: float) -> float:
            raw = os.getenv(key)
            if raw is None or raw == "":
                return default
            return float(raw)

        base = cls.defaults()
        cfg = cls(
            base_url=os.getenv("WALLETPAY_BASE_URL", base.base_url),
            checkout_path=os.getenv("WALLETPAY_CHECKOUT_PATH", base.checkout_path),
            provider_tag=os.getenv("WALLETPAY_PROVIDER_TAG", base.provider_tag),
            http_timeout=_float_env("WALLETPAY_HTTP_TIMEOUT", base.http_timeout),
            interaction_queue=os.getenv("WALLETPAY_INTERACTION_QUEUE", base.interaction_queue),
            log_level=os.getenv("WALLETPAY_LOG_LEVEL", base.log_level).upper(),
            log_file=os.getenv("WALLETPAY_LOG_FILE") or None,
            metrics_enabled=env_bool("WALLETPAY_METRICS_ENABLED", base.metrics_enabled),
        )
        cfg._validate()
        _sanity_check(cfg)
        return cfg

    def _validate(self) -> None:
        if self.http_timeout <= 0:
            raise ValueError("WALLETPAY_HTTP_TIMEOUT must be > 0")
        if not self.checkout_path.startswith("/"):
            raise ValueError("WALLETPAY_CHECKOUT_PATH must start with '/'")
        if not self.provider_tag:
            raise ValueError("WALLETPAY_PROVIDER_TAG must not be empty")
        if not self.interaction_queue:
            raise ValueError("WALLETPAY_INTERACTION_QUEUE must not be empty")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"WALLETPAY_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

        if self.base_url.startswith("http://") and "localhost" not in self.base_url:
            log.warning(
                "WARNING: WALLETPAY_BASE_URL=%s is not HTTPS. "
                "Payment nonces should only be posted over TLS.",
                self.base_url,
            )


def _sanity_check(cfg: Settings) -> None:
    """
    Log critical settings once at startup so overrides are obvious.
    """
    logging_cfg.log_event(
        log,
        "config_loaded",
        base_url=cfg.base_url,
        checkout_path=cfg.checkout_path,
        provider_tag=cfg.provider_tag,
        http_timeout=cfg.http_timeout,
    )
