"""Service configuration loaded from a YAML file with environment overrides."""

import os
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import yaml

DEFAULT_ENV = "local"
DEFAULT_PORT = 8080
DEFAULT_SEARCH_PATHS = ("configs", "./configs", ".")
_EXTENSIONS = (".yaml", ".yml", "")

_DEFAULTS = {
    "app": {"name": "photosite", "env": DEFAULT_ENV, "port": DEFAULT_PORT},
    "server": {"read_timeout": 10, "write_timeout": 15},
    "postgres": {
        "sslmode": "disable",
        "max_open_conns": 20,
        "max_idle_conns": 10,
        "conn_max_lifetime_minutes": 30,
    },
    "oss": {"presign_expire_seconds": 300},
    "security": {
        "behavior": {
            "enabled": True,
            "window_seconds": 60,
            "ip_limit_per_window": 120,
            "suspicious_ip_limit_per_window": 20,
        }
    },
    "log": {"level": "info"},
}

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class ConfigError(Exception):
    """The configuration could not be read or decoded."""


@dataclass
class AppConfig:
    name: str = ""
    env: str = ""
    port: int = 0


@dataclass
class ServerConfig:
    read_timeout: int = 0
    write_timeout: int = 0


@dataclass
class PostgresConfig:
    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    dbname: str = ""
    sslmode: str = ""
    max_open_conns: int = 0
    max_idle_conns: int = 0
    conn_max_lifetime_minutes: int = 0


@dataclass
class LogConfig:
    level: str = ""


@dataclass
class BehaviorSecurityConfig:
    enabled: bool = False
    window_seconds: int = 0
    ip_limit_per_window: int = 0
    suspicious_ip_limit_per_window: int = 0


@dataclass
class SecurityConfig:
    behavior: BehaviorSecurityConfig = field(default_factory=BehaviorSecurityConfig)


@dataclass
class OSSConfig:
    bucket_name: str = ""
    endpoint: str = ""
    public_base_url: str = ""
    region: str = ""
    presign_expire_seconds: int = 0


@dataclass
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    oss: OSSConfig = field(default_factory=OSSConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    log: LogConfig = field(default_factory=LogConfig)


def _lower_keys(value):
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def _merge(base, override):
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _find_config_file(name, search_paths):
    for base in search_paths:
        for ext in _EXTENSIONS:
            candidate = Path(base) / f"{name}{ext}"
            if candidate.is_file():
                return candidate
    return None


def _coerce(kind, raw, key):
    if raw is None:
        return kind()
    if kind is bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, (int, float)):
            return raw != 0
        if isinstance(raw, str):
            if raw == "" or raw in _FALSE:
                return False
            if raw in _TRUE:
                return True
        raise ConfigError(f"unmarshal config failed: cannot parse {key!r} as bool: {raw!r}")
    if kind is int:
        if isinstance(raw, bool):
            return int(raw)
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float):
            return int(raw)
        if isinstance(raw, str):
            if raw == "":
                return 0
            try:
                return int(raw, 0)
            except ValueError as exc:
                raise ConfigError(f"unmarshal config failed: cannot parse {key!r} as int: {raw!r}") from exc
        raise ConfigError(f"unmarshal config failed: cannot parse {key!r} as int: {raw!r}")
    if kind is str:
        if isinstance(raw, str):
            return raw
        if isinstance(raw, bool):
            return "1" if raw else "0"
        if isinstance(raw, (int, float)):
            return str(raw)
        raise ConfigError(f"unmarshal config failed: cannot decode {key!r} as string")
    raise ConfigError(f"unmarshal config failed: unsupported type for {key!r}")


def _build(cls, data, path, environ):
    values = {}
    for f in fields(cls):
        key_path = [*path, f.name]
        dotted = ".".join(key_path)
        if is_dataclass(f.type):
            section = data.get(f.name)
            if section is None:
                section = {}
            if not isinstance(section, dict):
                raise ConfigError(f"unmarshal config failed: {dotted!r} must be a mapping")
            values[f.name] = _build(f.type, section, key_path, environ)
            continue
        env_value = environ.get("_".join(key_path).upper())
        raw = env_value if env_value else data.get(f.name)
        values[f.name] = _coerce(f.type, raw, dotted)
    return cls(**values)


def load(environ=None, search_paths=None):
    """Load ``config.<APP_ENV>.yaml`` from the search paths, then apply defaults and env overrides."""
    if environ is None:
        environ = os.environ
    if search_paths is None:
        search_paths = DEFAULT_SEARCH_PATHS

    env = environ.get("APP_ENV") or DEFAULT_ENV
    name = f"config.{env}"

    path = _find_config_file(name, search_paths)
    if path is None:
        raise ConfigError(
            f"read config failed: config file {name!r} not found in {[str(p) for p in search_paths]}"
        )
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"read config failed: {exc}") from exc
    if content is None:
        content = {}
    if not isinstance(content, dict):
        raise ConfigError("read config failed: top level of config file must be a mapping")

    data = _merge(_DEFAULTS, _lower_keys(content))
    cfg = _build(Config, data, [], environ)

    if cfg.app.env == "":
        cfg.app.env = env
    return cfg