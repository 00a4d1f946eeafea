import importlib

from mazeserver.common import config
from mazeserver.common.constants import DEFAULT_LATENCY_MS, DEFAULT_PORT
from mazeserver.main import build_parser


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MAZESERVER_PORT", "6123")
    monkeypatch.setenv("MAZESERVER_LATENCY_MS", "50")
    monkeypatch.setenv("MAZESERVER_RANDOM_SEED", "77")
    monkeypatch.setenv("MAZESERVER_LOG_LEVEL", "debug")
    try:
        reloaded = importlib.reload(config)
        s = reloaded.settings
        assert s.port == 6123
        assert s.latency_ms == 50
        assert s.random_seed == 77
        assert s.log_level == "DEBUG"
    finally:
        monkeypatch.undo()
        importlib.reload(config)


def test_settings_defaults():
    s = config.Settings(
        host="0.0.0.0",
        port=DEFAULT_PORT,
        latency_ms=DEFAULT_LATENCY_MS,
        random_seed=None,
        log_level="INFO",
    )
    assert s.port == 5000


def test_cli_overrides_settings():
    defaults = config.Settings(host="127.0.0.1", port=5000, latency_ms=200, random_seed=None)
    args = build_parser(defaults).parse_args(["--port", "7000", "--latency-ms", "0", "--seed", "3"])
    assert args.port == 7000
    assert args.latency_ms == 0
    assert args.seed == 3
    assert args.host == "127.0.0.1"
