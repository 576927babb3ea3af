import pytest

from tinylog.config import LogConfig, load_config
from tinylog.models import LogLevel

_ENV_VARS = [
    "TINYLOG_LEVEL",
    "TINYLOG_QUIET",
    "TINYLOG_COLOR",
    "TINYLOG_STRICT",
    "TINYLOG_SINK_CAPACITY",
    "TINYLOG_FILE",
    "TINYLOG_FILE_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    # Run from an empty directory so a developer's `.env` is not picked up.
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_log_config_accepts_level_names():
    cfg = LogConfig(level="warn", file_level=4)
    assert cfg.level is LogLevel.WARN
    assert cfg.file_level is LogLevel.ERROR


@pytest.mark.parametrize("level", ["loud", 9, -1])
def test_log_config_rejects_unknown_levels(level: object):
    with pytest.raises(ValueError):
        LogConfig(level=level)


@pytest.mark.parametrize("capacity", [0, -3])
def test_log_config_sink_capacity_must_be_positive(capacity: int):
    with pytest.raises(ValueError):
        LogConfig(sink_capacity=capacity)


def test_log_config_blank_file_path_means_no_file():
    assert LogConfig(file_path="   ").file_path is None


def test_load_config_defaults(clean_env: pytest.MonkeyPatch):
    cfg = load_config()
    assert cfg.level is LogLevel.TRACE
    assert cfg.quiet is False
    assert cfg.use_color is False
    assert cfg.strict is False
    assert cfg.sink_capacity == 2
    assert cfg.file_path is None
    assert cfg.file_level is LogLevel.TRACE


def test_load_config_parses_optional_fields(clean_env: pytest.MonkeyPatch):
    clean_env.setenv("TINYLOG_LEVEL", "warn")
    clean_env.setenv("TINYLOG_QUIET", "yes")
    clean_env.setenv("TINYLOG_COLOR", "on")
    clean_env.setenv("TINYLOG_STRICT", "1")
    clean_env.setenv("TINYLOG_SINK_CAPACITY", "4")
    clean_env.setenv("TINYLOG_FILE", "/var/log/app.log")
    clean_env.setenv("TINYLOG_FILE_LEVEL", "DEBUG")

    cfg = load_config()
    assert cfg.level is LogLevel.WARN
    assert cfg.quiet is True
    assert cfg.use_color is True
    assert cfg.strict is True
    assert cfg.sink_capacity == 4
    assert cfg.file_path == "/var/log/app.log"
    assert cfg.file_level is LogLevel.DEBUG


def test_load_config_reads_dotenv(clean_env: pytest.MonkeyPatch, tmp_path):
    (tmp_path / ".env").write_text("TINYLOG_LEVEL=ERROR\nTINYLOG_QUIET=true\n", encoding="utf-8")
    try:
        cfg = load_config()
        assert cfg.level is LogLevel.ERROR
        assert cfg.quiet is True
    finally:
        # load_dotenv writes into os.environ; undo it for later tests.
        clean_env.delenv("TINYLOG_LEVEL", raising=False)
        clean_env.delenv("TINYLOG_QUIET", raising=False)


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("TINYLOG_QUIET", "maybe", "TINYLOG_QUIET must be a boolean"),
        ("TINYLOG_SINK_CAPACITY", "two", "TINYLOG_SINK_CAPACITY must be an integer"),
        ("TINYLOG_LEVEL", "loud", "TINYLOG_LEVEL must be one of"),
    ],
)
def test_load_config_actionable_errors(clean_env: pytest.MonkeyPatch, name: str, value: str, message: str):
    clean_env.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        load_config()
