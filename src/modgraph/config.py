"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from modgraph.cache import CachePolicy
from modgraph.toolchain import DEFAULT_DECLARATION_COMMAND, DEFAULT_TRANSFORM_COMMAND

CONFIG_FILENAME = "modgraph.toml"
DISABLE_CACHE_ENV = "MODGRAPH_DISABLE_CACHE"
DEFAULT_CACHE_DIRECTORY = Path("~/.cache/modgraph/transpiled")


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Transform cache location and eviction bounds."""

    enabled: bool
    directory: Path
    policy: CachePolicy


@dataclass(slots=True, frozen=True)
class ToolchainConfig:
    """External commands used for type erasure and declaration emission."""

    transform_command: tuple[str, ...]
    declarations_enabled: bool
    declaration_command: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class BuildConfig:
    """Fully merged build configuration."""

    root: Path
    out_dir: Path
    data_dir: Path
    cache: CacheConfig
    toolchain: ToolchainConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root": str(self.root),
            "out_dir": str(self.out_dir),
            "data_dir": str(self.data_dir),
            "cache": {
                "enabled": self.cache.enabled,
                "directory": str(self.cache.directory),
                "max_total_bytes": self.cache.policy.max_total_bytes,
                "keep_entries": self.cache.policy.keep_entries,
                "grace_seconds": self.cache.policy.grace_seconds,
            },
            "transform": {"command": list(self.toolchain.transform_command)},
            "declarations": {
                "enabled": self.toolchain.declarations_enabled,
                "command": list(self.toolchain.declaration_command),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    out_dir: Path | None = None
    data_dir: Path | None = None
    cache_dir: Path | None = None
    cache_enabled: bool | None = None
    declarations_enabled: bool | None = None


def default_config(root: Path) -> BuildConfig:
    """Build default config for a given project root."""
    resolved_root = root.resolve()
    return BuildConfig(
        root=resolved_root,
        out_dir=resolved_root / "dist",
        data_dir=resolved_root / ".modgraph",
        cache=CacheConfig(
            enabled=True,
            directory=DEFAULT_CACHE_DIRECTORY.expanduser(),
            policy=CachePolicy(),
        ),
        toolchain=ToolchainConfig(
            transform_command=DEFAULT_TRANSFORM_COMMAND,
            declarations_enabled=True,
            declaration_command=DEFAULT_DECLARATION_COMMAND,
        ),
    )


def load_project_config_file(root: Path) -> dict[str, object]:
    """Load optional modgraph.toml from the project root."""
    config_path = root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILENAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _command(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item:
            raise ValueError(f"Config field '{name}' must contain only non-empty strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_path(value: object, name: str, root: Path, default: Path) -> Path:
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _optional_positive_int(value: object, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    return value


def _optional_non_negative_number(value: object, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"Config field '{name}' must be a non-negative number.")
    return float(value)


def merge_config(
    base: BuildConfig,
    project_payload: dict[str, object],
    overrides: CliOverrides,
    environ: Mapping[str, str] | None = None,
) -> BuildConfig:
    """Merge defaults, project config, environment, then CLI/startup overrides."""
    build_payload = _get_table(project_payload, "build")
    cache_payload = _get_table(project_payload, "cache")
    transform_payload = _get_table(project_payload, "transform")
    declarations_payload = _get_table(project_payload, "declarations")

    out_dir = _optional_path(
        build_payload.get("out_dir"), "build.out_dir", base.root, base.out_dir
    )
    data_dir = _optional_path(
        build_payload.get("data_dir"), "build.data_dir", base.root, base.data_dir
    )

    cache_enabled = _optional_bool(
        cache_payload.get("enabled"), "cache.enabled", base.cache.enabled
    )
    env = os.environ if environ is None else environ
    if env.get(DISABLE_CACHE_ENV, "").strip():
        cache_enabled = False
    policy = CachePolicy(
        max_total_bytes=_optional_positive_int(
            cache_payload.get("max_total_bytes"),
            "cache.max_total_bytes",
            base.cache.policy.max_total_bytes,
        ),
        keep_entries=_optional_positive_int(
            cache_payload.get("keep_entries"),
            "cache.keep_entries",
            base.cache.policy.keep_entries,
        ),
        grace_seconds=_optional_non_negative_number(
            cache_payload.get("grace_seconds"),
            "cache.grace_seconds",
            base.cache.policy.grace_seconds,
        ),
    )
    cache = CacheConfig(
        enabled=cache_enabled,
        directory=_optional_path(
            cache_payload.get("directory"), "cache.directory", base.root, base.cache.directory
        ),
        policy=policy,
    )

    transform_command = base.toolchain.transform_command
    if "command" in transform_payload:
        transform_command = _command(transform_payload["command"], "transform.command")
    declaration_command = base.toolchain.declaration_command
    if "command" in declarations_payload:
        declaration_command = _command(declarations_payload["command"], "declarations.command")
    toolchain = ToolchainConfig(
        transform_command=transform_command,
        declarations_enabled=_optional_bool(
            declarations_payload.get("enabled"),
            "declarations.enabled",
            base.toolchain.declarations_enabled,
        ),
        declaration_command=declaration_command,
    )

    merged = BuildConfig(
        root=base.root,
        out_dir=out_dir,
        data_dir=data_dir,
        cache=cache,
        toolchain=toolchain,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: BuildConfig, overrides: CliOverrides) -> BuildConfig:
    """Apply startup overrides at highest precedence."""
    cache = CacheConfig(
        enabled=(
            overrides.cache_enabled
            if overrides.cache_enabled is not None
            else config.cache.enabled
        ),
        directory=(overrides.cache_dir or config.cache.directory).resolve(),
        policy=config.cache.policy,
    )
    toolchain = ToolchainConfig(
        transform_command=config.toolchain.transform_command,
        declarations_enabled=(
            overrides.declarations_enabled
            if overrides.declarations_enabled is not None
            else config.toolchain.declarations_enabled
        ),
        declaration_command=config.toolchain.declaration_command,
    )
    return BuildConfig(
        root=config.root,
        out_dir=(overrides.out_dir or config.out_dir).resolve(),
        data_dir=(overrides.data_dir or config.data_dir).resolve(),
        cache=cache,
        toolchain=toolchain,
    )


def load_effective_config(
    root: Path,
    overrides: CliOverrides | None = None,
    environ: Mapping[str, str] | None = None,
) -> BuildConfig:
    """Load effective config using merge order defaults -> project config -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_project_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides(), environ=environ)
