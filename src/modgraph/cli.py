"""Command-line entrypoint for module graph builds."""

from __future__ import annotations

import argparse
import json
import sys
import time
import uuid
from pathlib import Path
from typing import TextIO

from modgraph.builder import ModuleBuilder, ProjectFileSystem
from modgraph.cache import CachedTransformer, TransformCache
from modgraph.config import BuildConfig, CliOverrides, load_effective_config
from modgraph.errors import BuildError
from modgraph.logging import JsonlBuildLogger, failure_event, success_event
from modgraph.security import PathBlockedError, relative_entry_path
from modgraph.toolchain import CommandDeclarationEmitter, CommandTransformer

BUILD_LOG_FILENAME = "builds.jsonl"
EXIT_BUILD_FAILED = 1
EXIT_USAGE = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the build and history commands."""
    parser = argparse.ArgumentParser(prog="modgraph")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build the module graph of one or more entries.")
    build.add_argument("--root", required=False, default=".")
    build.add_argument("--out", required=False, default=None)
    build.add_argument("--entry", required=True, action="append", dest="entries")
    build.add_argument("--data-dir", required=False, default=None)
    build.add_argument("--cache-dir", required=False, default=None)
    build.add_argument("--no-cache", action="store_true")
    build.add_argument("--no-declarations", action="store_true")

    history = subparsers.add_parser("history", help="Print recent build events.")
    history.add_argument("--root", required=False, default=".")
    history.add_argument("--data-dir", required=False, default=None)
    history.add_argument("--limit", type=int, required=False, default=20)
    return parser


def create_builder(config: BuildConfig, cache: TransformCache) -> ModuleBuilder:
    """Wire the filesystem, cached transformer, and optional declaration emitter."""
    filesystem = ProjectFileSystem(root=config.root, out_dir=config.out_dir)
    declarations = None
    if config.toolchain.declarations_enabled:
        declarations = CommandDeclarationEmitter(config.toolchain.declaration_command)
    return ModuleBuilder(
        reader=filesystem,
        writer=filesystem,
        transformer=CachedTransformer(
            CommandTransformer(config.toolchain.transform_command),
            cache,
        ),
        declarations=declarations,
    )


def open_cache(config: BuildConfig) -> TransformCache:
    """Open the configured transform cache, or a disabled one."""
    if not config.cache.enabled:
        return TransformCache.disabled()
    return TransformCache.open(config.cache.directory, policy=config.cache.policy)


def open_build_log(config: BuildConfig, err_stream: TextIO) -> JsonlBuildLogger | None:
    """Open the build log under the data directory, reporting failures to err_stream."""
    try:
        return JsonlBuildLogger(path=config.data_dir / BUILD_LOG_FILENAME)
    except OSError as error:
        err_stream.write(f"error[DATA_DIR_UNAVAILABLE]: {config.data_dir}: {error}\n")
        return None


def run_build(
    config: BuildConfig,
    entries: list[str],
    out_stream: TextIO,
    err_stream: TextIO,
) -> int:
    """Build each entry in order, stopping at the first failure."""
    try:
        relative_entries = [relative_entry_path(config.root, entry) for entry in entries]
    except PathBlockedError as error:
        err_stream.write(f"error[OUT_OF_ROOT]: {error.reason} {error.hint}\n")
        return EXIT_USAGE

    logger = open_build_log(config, err_stream)
    if logger is None:
        return EXIT_USAGE
    cache = open_cache(config)
    builder = create_builder(config, cache)
    for entry in relative_entries:
        build_id = uuid.uuid4().hex
        started = time.perf_counter()
        try:
            summary = builder.build(entry)
        except BuildError as error:
            duration_ms = int((time.perf_counter() - started) * 1000)
            logger.append(failure_event(build_id, entry, error, duration_ms, cache.enabled))
            err_stream.write(f"error[{error.code}]: {error}\n")
            return EXIT_BUILD_FAILED
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.append(success_event(build_id, summary, duration_ms, cache.enabled))
        out_stream.write(
            json.dumps(
                {
                    "build_id": build_id,
                    "entry": summary.entry,
                    "written": list(summary.written),
                },
                sort_keys=True,
            )
        )
        out_stream.write("\n")
    return 0


def run_history(
    config: BuildConfig,
    limit: int,
    out_stream: TextIO,
    err_stream: TextIO,
) -> int:
    """Print recent build events as JSON lines."""
    logger = open_build_log(config, err_stream)
    if logger is None:
        return EXIT_USAGE
    for event in logger.read(limit=limit):
        out_stream.write(json.dumps(event, sort_keys=True))
        out_stream.write("\n")
    return 0


def _overrides(args: argparse.Namespace) -> CliOverrides:
    if args.command == "history":
        return CliOverrides(data_dir=_optional_path(args.data_dir))
    return CliOverrides(
        out_dir=_optional_path(args.out),
        data_dir=_optional_path(args.data_dir),
        cache_dir=_optional_path(args.cache_dir),
        cache_enabled=False if args.no_cache else None,
        declarations_enabled=False if args.no_declarations else None,
    )


def _optional_path(value: str | None) -> Path | None:
    if value is None:
        return None
    return Path(value).resolve()


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the modgraph command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        config = load_effective_config(root=Path(args.root), overrides=_overrides(args))
    except ValueError as error:
        sys.stderr.write(f"error[INVALID_CONFIG]: {error}\n")
        return EXIT_USAGE
    if args.command == "history":
        return run_history(config, args.limit, sys.stdout, sys.stderr)
    return run_build(config, args.entries, sys.stdout, sys.stderr)


if __name__ == "__main__":
    raise SystemExit(main())
