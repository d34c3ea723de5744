"""Configuration loading for testgen (testgen.json)."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import yaml

from .logging import get_logger

CONFIG_FILENAME = "testgen.json"
API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"
BACKEND_TYPES = ("openai", "bedrock")

_PROJECT_MARKERS = ("build.gradle", "build.gradle.kts", "pom.xml")
_YAML_SUFFIXES = (".yml", ".yaml")

DEFAULT_CONFIG: Dict[str, Any] = {
    "coverage": {
        "execFile": "build/reports/jacoco/test/jacocoTestReport.xml",
        "classDir": "build/classes/java/main",
        "sourceDir": "src/main/java",
        "threshold": 80,
    },
    "aiProvider": {
        "type": "openai",
        "apiKey": API_KEY_PLACEHOLDER,
        "model": "gpt-4",
    },
    "output": {
        "dir": "src/test/java/generated",
    },
    "targetPackages": [],
    "exclusions": ["**/*Application", "**/*Config", "**/*Exception"],
}

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or holds invalid values."""


@dataclass(frozen=True)
class CoverageSettings:
    """Where the coverage trace, compiled classes and sources live."""

    exec_file: Path
    class_dir: Path
    source_dir: Path
    threshold: float = 80.0


@dataclass(frozen=True)
class BackendSettings:
    """AI provider selection and credentials."""

    type: str = "openai"
    model: Optional[str] = None
    api_key: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_key: Optional[str] = None
    region: Optional[str] = None
    base_url: Optional[str] = None
    request_timeout: float = 60.0
    delay_seconds: float = 1.0


@dataclass(frozen=True)
class OutputSettings:
    """Destination for generated tests."""

    dir: Path


@dataclass(frozen=True)
class GenerationConfig:
    """Process-wide settings, loaded once at startup and immutable for the run."""

    root: Path
    coverage: CoverageSettings
    output: OutputSettings
    backend: BackendSettings = field(default_factory=BackendSettings)
    target_packages: Tuple[str, ...] = ()
    exclusions: Tuple[str, ...] = ()


def find_project_root(start: Path) -> Path:
    """Walk up from ``start`` to the first directory holding a build file."""
    start = start.expanduser().resolve()
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in _PROJECT_MARKERS):
            return candidate
    return start


def default_config_path(cwd: Path | None = None) -> Path:
    """Return ``<project root>/testgen.json`` for the current working directory."""
    return find_project_root(cwd or Path.cwd()) / CONFIG_FILENAME


def load_config(config_path: Path, *, root: Path | None = None) -> GenerationConfig:
    """Load configuration from disk, writing a default file first when it is missing."""
    config_file = config_path.expanduser()
    if config_file.is_dir():
        config_file = config_file / CONFIG_FILENAME
    config_file = config_file.resolve()
    project_root = root.resolve() if root is not None else find_project_root(config_file.parent)

    if not config_file.exists():
        write_default_config(config_file)
        logger.info("Created default configuration at %s", config_file)
        data: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
    else:
        data = _read_config(config_file)

    return parse_config(data, project_root)


def write_default_config(path: Path) -> Path:
    """Persist the default configuration as pretty-printed JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to write default configuration to {path}: {exc}") from exc
    return path


def parse_config(data: Dict[str, Any], root: Path) -> GenerationConfig:
    """Build a :class:`GenerationConfig` from a decoded mapping."""
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    coverage_defaults = DEFAULT_CONFIG["coverage"]
    coverage_data = _as_dict(data.get("coverage"))
    threshold = _as_float(coverage_data.get("threshold"))
    if threshold is None:
        threshold = float(coverage_defaults["threshold"])
    if not 0 <= threshold <= 100:
        raise ConfigError(f"coverage.threshold must be a percentage between 0 and 100, got {threshold}")
    coverage = CoverageSettings(
        exec_file=_resolve(root, _as_str(coverage_data.get("execFile")) or coverage_defaults["execFile"]),
        class_dir=_resolve(root, _as_str(coverage_data.get("classDir")) or coverage_defaults["classDir"]),
        source_dir=_resolve(root, _as_str(coverage_data.get("sourceDir")) or coverage_defaults["sourceDir"]),
        threshold=threshold,
    )

    provider_data = _as_dict(data.get("aiProvider"))
    backend_type = (_as_str(provider_data.get("type")) or "openai").strip().lower()
    if backend_type not in BACKEND_TYPES:
        raise ConfigError(
            f"Unknown aiProvider.type '{backend_type}'. Expected one of: {', '.join(BACKEND_TYPES)}"
        )
    timeout = _as_float(provider_data.get("timeoutSeconds"))
    delay = _as_float(provider_data.get("delaySeconds"))
    if delay is not None and delay < 0:
        raise ConfigError("aiProvider.delaySeconds must not be negative")
    backend = BackendSettings(
        type=backend_type,
        model=_as_str(provider_data.get("model")),
        api_key=_as_str(provider_data.get("apiKey")),
        aws_access_key_id=_as_str(provider_data.get("awsAccessKeyId")),
        aws_secret_key=_as_str(provider_data.get("awsSecretKey")),
        region=_as_str(provider_data.get("region")),
        base_url=_as_str(provider_data.get("baseUrl")),
        request_timeout=timeout if timeout is not None else 60.0,
        delay_seconds=delay if delay is not None else 1.0,
    )

    output_data = _as_dict(data.get("output"))
    output = OutputSettings(
        dir=_resolve(root, _as_str(output_data.get("dir")) or DEFAULT_CONFIG["output"]["dir"])
    )

    if "exclusions" in data:
        exclusions = _as_str_list(data.get("exclusions"))
    else:
        exclusions = list(DEFAULT_CONFIG["exclusions"])

    return GenerationConfig(
        root=root,
        coverage=coverage,
        backend=backend,
        output=output,
        target_packages=tuple(_as_str_list(data.get("targetPackages"))),
        exclusions=tuple(exclusions),
    )


def _read_config(path: Path) -> Dict[str, Any]:
    """Decode ``path`` as JSON, or as YAML when it has a ``.yml``/``.yaml`` suffix."""
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    else:
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _resolve(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise ConfigError(f"Expected a number, got '{value}'") from exc
    return None


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "API_KEY_PLACEHOLDER",
    "BackendSettings",
    "ConfigError",
    "CoverageSettings",
    "DEFAULT_CONFIG",
    "GenerationConfig",
    "OutputSettings",
    "default_config_path",
    "find_project_root",
    "load_config",
    "parse_config",
    "write_default_config",
]
