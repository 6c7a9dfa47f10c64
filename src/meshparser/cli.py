"""Command line interface for meshparser."""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace
from pathlib import Path

from .api import decode_file, mesh_summary
from .bench import run_bench
from .config import (
    BenchOptions,
    ConfigError,
    ENV_CONCURRENCY,
    apply_env_overrides,
    load_bench_config,
)
from .decoding.errors import MeshError, NotMeshError
from .logging import configure_logging, get_logger, step
from .reporting import (
    BACKENDS,
    get_reporter,
    make_reporter,
    set_reporter,
    set_verbosity,
    task,
)

EXIT_OK = 0
EXIT_CORRUPT = 1
EXIT_NOT_MESH = 2


def _inspect_cmd(args: argparse.Namespace) -> int:
    rep = get_reporter()
    try:
        mesh = decode_file(args.mesh)
    except NotMeshError as exc:
        rep.error(f"{args.mesh.name}: {exc}", code=exc.code)
        return EXIT_NOT_MESH
    except MeshError as exc:
        rep.error(f"{args.mesh.name}: {exc}", code=exc.code)
        return EXIT_CORRUPT
    except OSError as exc:
        rep.error(f"{args.mesh}: {exc}")
        return EXIT_CORRUPT
    summary = mesh_summary(mesh)
    rep.flush()
    if args.json:
        print(json.dumps(summary, indent=2, sort_keys=True))
        return EXIT_OK
    rep.status(
        "Mesh summary: "
        + f"file={args.mesh.name} vertices={summary['vertex_count']} "
        + f"indices={summary['index_count']} "
        + f"triangles={summary['triangle_count']} "
        + f"sub_meshes={summary['sub_mesh_count']}"
    )
    for i, sm in enumerate(summary["sub_meshes"]):
        start = sm["index_buffer_start"]
        end = start + sm["index_buffer_length"]
        rep.verbose(
            f"sub-mesh {i}: name={sm['name']!r} shader={sm['shader']} "
            f"indices=[{start}, {end})"
        )
    return EXIT_OK


def _validate_cmd(args: argparse.Namespace) -> int:
    failed = 0
    with task("validate", "Validate meshes", total=len(args.meshes)) as rep:
        for path in args.meshes:
            try:
                decode_file(path)
            except (MeshError, OSError) as exc:
                failed += 1
                code = getattr(exc, "code", "E_IO")
                rep.error(f"{path}: {exc}", code=code)
                outcome = "failed"
            else:
                outcome = "ok"
            rep.advance("validate", current_item=path.name, outcome=outcome)
    rep.status(
        "Validate summary: "
        + f"files={len(args.meshes)} ok={len(args.meshes) - failed} "
        + f"failed={failed}"
    )
    return EXIT_CORRUPT if failed else EXIT_OK


def _bench_options(args: argparse.Namespace) -> BenchOptions:
    if args.config is not None:
        opts = load_bench_config(args.config)
    else:
        opts = BenchOptions(directory=args.directory or Path("."))
    overrides: dict = {}
    if args.directory is not None:
        overrides["directory"] = args.directory
    if args.pattern is not None:
        overrides["pattern"] = args.pattern
    if args.recursive:
        overrides["recursive"] = True
    if args.threads:
        overrides["use_threads"] = True
    # precedence: --concurrency, then env, then config file
    if args.concurrency is not None:
        overrides["concurrency"] = args.concurrency
    else:
        opts = apply_env_overrides(opts)
    return replace(opts, **overrides)


def _bench_cmd(args: argparse.Namespace) -> int:
    rep = get_reporter()
    try:
        opts = _bench_options(args)
    except (ConfigError, FileNotFoundError) as exc:
        rep.error(f"bench config: {exc}")
        return EXIT_CORRUPT
    step(f"decoding {opts.pattern} under {opts.directory}")
    result = run_bench(opts)
    for o in result.outcomes:
        if o.status != "ok":
            rep.warning(f"{o.path.name}: {o.status}: {o.error}")
    rep.status(
        "Bench summary: "
        + f"files={result.files} ok={result.ok} not_mesh={result.not_mesh} "
        + f"corrupt={result.corrupt} unreadable={result.unreadable} "
        + f"concurrency={opts.concurrency} "
        + f"elapsed={result.elapsed_seconds:.3f}s"
    )
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="meshparser", description="Binary .mesh decoder"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=BACKENDS,
        default="plain",
        help="Reporter backend: plain (default), rich, json (JSONL), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("inspect", help="Decode one mesh and summarise it")
    i.add_argument("mesh", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON summary")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Decode meshes and report failures")
    v.add_argument("meshes", type=Path, nargs="+")
    v.set_defaults(func=_validate_cmd)

    b = sub.add_parser("bench", help="Decode a directory concurrently")
    b.add_argument("directory", type=Path, nargs="?")
    b.add_argument(
        "--config", type=Path, help="Bench options file (JSON or YAML)"
    )
    b.add_argument("--pattern", help="Glob for mesh files (default *.mesh)")
    b.add_argument(
        "--recursive", action="store_true", help="Descend into subdirectories"
    )
    b.add_argument(
        "--concurrency",
        type=int,
        help=f"Max files in flight (default 15, env {ENV_CONCURRENCY})",
    )
    b.add_argument(
        "--threads",
        action="store_true",
        help="Stream files through worker threads instead of preloading",
    )
    b.add_argument("--json", action="store_true", help="Emit JSON result")
    b.set_defaults(func=_bench_cmd)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    interactive = sys.stderr.isatty() and not os.environ.get("CI")
    # a --json payload owns stdout; JSON Lines events move to stderr
    events = sys.stderr if getattr(args, "json", False) else None
    set_reporter(
        make_reporter(args.reporter, interactive=interactive, events=events)
    )
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    get_logger().debug("command: %s", args.cmd)
    try:
        return args.func(args)
    finally:
        get_reporter().flush()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
