import json
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"

GENERATOR_MODES = ("plain", "subsecond", "monotonic")
PRECISIONS = ("millisecond", "microsecond", "nanosecond")


class GeneratorConfig:
    __slots__ = ("mode", "drift_tolerance", "precision")

    def __init__(self, mode="monotonic", drift_tolerance=10_000, precision=None):
        if mode not in GENERATOR_MODES:
            raise ValueError(f"unknown generator mode: {mode}")
        if precision is not None and precision.lower() not in PRECISIONS:
            raise ValueError(f"unknown sub-second precision: {precision}")
        self.mode = mode
        self.drift_tolerance = drift_tolerance
        self.precision = precision


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "crash_file")

    def __init__(self, level="INFO", crash_file="logs/crash.log"):
        self.level = level
        self.crash_file = crash_file


class Config:
    __slots__ = ("generator", "server", "logging")

    def __init__(self, generator=None, server=None, logging=None):
        self.generator = generator or GeneratorConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            GeneratorConfig(**d.get("generator", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
        )


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        return Config.from_dict(json.load(file))
