"""
Tests for logging setup, metrics and the controller factory.
"""

import json
import logging

import pytest
from prometheus_client import CollectorRegistry

from walletpay.config.settings import Settings
from walletpay.core.error_reporter import ErrorReporter
from walletpay.core.interaction_lock import InteractionLockRegistry
from walletpay.factory import ControllerDependencies, create_controller
from walletpay.infra.logging_cfg import AsyncQueueHandler, JsonFormatter, build_logger, log_event
from walletpay.infra.request_sender import HttpRequestSender
from walletpay.monitoring.metrics import WalletMetrics


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def restore_walletpay_logger():
    logger = logging.getLogger("walletpay")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def _settings(**overrides):
    return Settings(**{**Settings.defaults().dump(), **overrides})


class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord("walletpay", logging.WARNING, __file__, 1, "hello %s", ("there",), None)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "walletpay"
        assert payload["msg"] == "hello there"
        assert "ts" in payload

    def test_json_formatter_flattens_events(self):
        message = json.dumps({"event": "wallet_not_ready", "method_id": "walletpay"})
        record = logging.LogRecord("walletpay", logging.INFO, __file__, 1, message, None, None)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["event"] == "wallet_not_ready"
        assert payload["method_id"] == "walletpay"
        assert "msg" not in payload

    def test_log_event_emits_json_line(self):
        logger = logging.getLogger("walletpay.test.log_event")
        logger.propagate = False
        handler = ListHandler()
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

        log_event(logger, "wallet_configured", method_id="walletpay", environment="TEST")

        assert json.loads(handler.records[0].getMessage()) == {
            "event": "wallet_configured",
            "method_id": "walletpay",
            "environment": "TEST",
        }

    def test_component_default_log_goes_through_log_event(self, restore_walletpay_logger):
        logger = restore_walletpay_logger
        handler = ListHandler()
        logger.handlers[:] = [handler]
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        ErrorReporter().normalize(RuntimeError("offline"), stage="configure")

        record = handler.records[-1]
        assert record.levelno == logging.ERROR
        assert json.loads(record.getMessage()) == {
            "event": "wallet_error_normalized",
            "stage": "configure",
            "error_type": "RuntimeError",
            "error": "offline",
        }

    def test_build_logger_is_idempotent(self):
        name = "walletpay.test.build"
        first = build_logger(name, level="warning")
        second = build_logger(name, level=logging.DEBUG)

        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG
        assert second.propagate is False

    def test_build_logger_writes_json_file(self, tmp_path):
        path = tmp_path / "walletpay.jsonl"
        logger = build_logger("walletpay.test.file", level="INFO", file_path=str(path), async_file=False)

        logger.info("submission_succeeded")
        for handler in logger.handlers:
            handler.flush()

        line = path.read_text().strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "submission_succeeded"
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_async_queue_handler_delivers_on_close(self):
        target = ListHandler()
        handler = AsyncQueueHandler(target)
        handler.emit(logging.LogRecord("walletpay", logging.INFO, __file__, 1, "queued", None, None))

        handler.close()
        handler.close()

        assert [r.getMessage() for r in target.records] == ["queued"]
        assert handler.dropped == 0


class TestMetrics:
    def test_separate_registries(self):
        first = WalletMetrics()
        second = WalletMetrics()

        first.readiness_declined.labels(method_id="walletpay").inc()

        assert first.get_registry() is not second.get_registry()
        assert second.get_registry().get_sample_value(
            "wallet_readiness_declined_total", {"method_id": "walletpay"}
        ) is None

    def test_injected_registry(self):
        registry = CollectorRegistry()
        metrics = WalletMetrics(registry=registry)

        metrics.provider_errors.labels(method_id="walletpay", status_code="CANCELED").inc()

        assert registry.get_sample_value(
            "wallet_provider_errors_total", {"method_id": "walletpay", "status_code": "CANCELED"}
        ) == 1.0


class TestFactory:
    @pytest.mark.asyncio
    async def test_defaults_build_sender_and_metrics(
        self, restore_walletpay_logger, store, script_loader, capability_provider
    ):
        settings = _settings(base_url="https://shop.example", http_timeout=4.0)

        controller = create_controller(
            ControllerDependencies(
                store=store,
                script_loader=script_loader,
                capability_provider=capability_provider,
                settings=settings,
                locks=InteractionLockRegistry(),
            )
        )

        sender = controller.submission._request_sender
        assert isinstance(sender, HttpRequestSender)
        assert sender.base_url == "https://shop.example"
        assert isinstance(controller._metrics, WalletMetrics)
        assert controller.settings is settings
        await sender.close()

    def test_metrics_disabled(self, restore_walletpay_logger, store, script_loader, capability_provider, request_sender):
        controller = create_controller(
            ControllerDependencies(
                store=store,
                script_loader=script_loader,
                capability_provider=capability_provider,
                settings=_settings(metrics_enabled=False),
                request_sender=request_sender,
            )
        )

        assert controller._metrics is None
        assert controller.submission._request_sender is request_sender


class TestPublicApi:
    def test_exports_resolve(self):
        import walletpay

        assert walletpay.__version__ == "0.1.0"
        for name in walletpay.__all__:
            assert getattr(walletpay, name) is not None
