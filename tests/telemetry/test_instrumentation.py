"""Telemetry helper and instrumentation tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from battleship_duel.bot import targeting as targeting_module
from battleship_duel.bot.targeting import BotTargeting, Difficulty
from battleship_duel.config import DuelSettings
from battleship_duel.engine import board as board_module
from battleship_duel.engine.board import Board
from battleship_duel.engine.ship import Coordinate, Direction, Ship
from battleship_duel.service import session as session_module
from battleship_duel.service.registry import MatchRegistry
from battleship_duel.telemetry import config as telemetry_config_module
from battleship_duel.telemetry import logger as logger_module
from battleship_duel.telemetry import metrics as metrics_module
from battleship_duel.telemetry import tracer as tracer_module
from battleship_duel.telemetry.config import TelemetryConfig

OTEL_ENV = (
    "DUEL_ENABLE_TRACING",
    "DUEL_ENABLE_METRICS",
    "DUEL_ENABLE_LOGGING",
    "OTEL_TRACES_ENABLED",
    "OTEL_METRICS_ENABLED",
    "OTEL_LOGS_ENABLED",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
    "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
    "OTEL_SERVICE_NAME",
    "OTEL_SERVICE_NAMESPACE",
    "OTEL_RESOURCE_ATTRIBUTES",
)


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self.attributes: dict[str, object] = {}
        names.append(span_name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key, value):
        self.attributes[key] = value


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


def reset_singletons() -> None:
    tracer_module._TRACER = None
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}
    logger_module._LOGGER = None


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in OTEL_ENV:
        monkeypatch.delenv(name, raising=False)


def test_lazy_init_tracer_and_meter(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    assert tracer_module.get_tracer() is tracer_module.get_tracer()

    provider_instance = MagicMock()
    provider_instance.get_tracer.return_value = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert tracer_module._TRACER is provider_instance.get_tracer.return_value

    meter_provider = MagicMock()
    meter_provider.get_meter.return_value = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(
        TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example")
    )
    assert metrics_module._METER is meter_provider.get_meter.return_value
    reset_singletons()


def test_record_game_metric_reuses_counter(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "get_meter", lambda *_: meter)

    metrics_module.record_game_metric("duel_total", 1, {"winner": "User"})
    metrics_module.record_game_metric("duel_total", 2)

    meter.create_counter.assert_called_once_with("duel_total")
    counter = meter.create_counter.return_value
    counter.add.assert_any_call(1, attributes={"winner": "User"})
    counter.add.assert_any_call(2, attributes={})
    reset_singletons()


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig(enable_tracing=True, enable_logging=True))
    assert calls == ["tr", "lo"]


def test_config_from_env_defaults(clean_env) -> None:
    config = TelemetryConfig.from_env()
    assert not config.enable_tracing
    assert not config.enable_metrics
    assert not config.enable_logging
    assert config.service_name == "battleship-duel"


def test_config_from_env_endpoints_enable_exporters(
    clean_env, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "http://logs:4317")
    monkeypatch.setenv("OTEL_SERVICE_NAME", "duel-test")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "env=ci, team = games,broken")

    config = TelemetryConfig.from_env()
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_metrics_endpoint == "http://collector:4317/v1/metrics"
    assert config.otlp_logs_endpoint == "http://logs:4317"
    assert config.enable_tracing and config.enable_metrics and config.enable_logging
    assert config.service_name == "duel-test"
    assert config.resource_attributes == {"env": "ci", "team": "games"}
    assert config.resource_dict()["service.name"] == "duel-test"


def test_config_flags_from_env(clean_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DUEL_ENABLE_TRACING", "yes")
    monkeypatch.setenv("OTEL_METRICS_ENABLED", "0")
    config = TelemetryConfig.from_env()
    assert config.enable_tracing
    assert not config.enable_metrics


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(cls, **overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(TelemetryConfig, "from_env", classmethod(fake_from_env))

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_board_emits_spans(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    monkeypatch.setattr(board_module, "tracer", tracer)

    board = Board(owner="User")
    board.place(Ship("ship_4", 2, Coordinate(0, 0), Direction.HORIZONTAL))
    board.receive_shot(Coordinate(0, 0))
    assert tracer.span_names == ["board.place", "board.receive_shot"]


def test_bot_emits_span_per_shot(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    monkeypatch.setattr(targeting_module, "tracer", tracer)

    bot = BotTargeting(Difficulty.HARD)
    bot.next_shot()
    bot.next_shot()
    assert tracer.span_names == ["bot.next_shot", "bot.next_shot"]


def test_finished_match_records_completion_metric(monkeypatch: pytest.MonkeyPatch) -> None:
    metric_calls: list[tuple[str, float, dict | None]] = []
    monkeypatch.setattr(
        session_module,
        "record_game_metric",
        lambda name, value, attrs=None: metric_calls.append((name, value, attrs)),
    )

    registry = MatchRegistry(DuelSettings(rng_seed=1, win_threshold=1))
    match_id = registry.create_match(Difficulty.MEDIUM)
    anchor = registry.get(match_id).match.bot_board.ships[0].anchor
    registry.submit_shot(match_id, anchor.row, anchor.col)

    assert metric_calls == [
        (
            "battleship_duel_matches_completed_total",
            1,
            {"winner": "User", "difficulty": "Medium"},
        )
    ]


def test_logging_init_installs_handler_once(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    installed: list[object] = []
    monkeypatch.setattr(logger_module, "_install_root_handler", lambda handler: installed.append(handler))
    monkeypatch.setattr("opentelemetry._logs.set_logger_provider", MagicMock())

    logger = logger_module.init_logging(TelemetryConfig(service_name="duel-test"))
    assert logger.name == "duel-test"
    assert len(installed) == 1
    reset_singletons()
