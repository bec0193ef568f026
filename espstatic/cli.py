#!/usr/bin/env python3
"""
espstatic command line

Packs a finished web build into `<OUT_DIR>/_esp32/static_files.h`.

Usage:
    python -m espstatic build dist/                       # dist/ plus public/ if present
    python -m espstatic build dist/ --public-dir static/ --logging
    python -m espstatic build dist/ --no-public --strict
    python -m espstatic serve dist/ --port 8080           # preview what the firmware serves

Options not given on the command line fall back to ESPSTATIC_* environment
variables (ESPSTATIC_LOGGING, ESPSTATIC_PUBLIC_DIR, ...).
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ENFORCE_TIERS, PluginConfig
from .emitter import OUTPUT_SUBDIR
from .log import log_error
from .pipeline import BuildArtifact, BuildContext, BuildError, run_build
from .preview import PreviewServer


def collect_artifacts(out_dir: Path) -> List[BuildArtifact]:
    """Every file under `out_dir`, sorted, except previously generated output."""
    artifacts = []
    for path in sorted(out_dir.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(out_dir)
        if rel.parts[0] == OUTPUT_SUBDIR:
            continue
        artifacts.append(BuildArtifact(rel.as_posix(), path.read_bytes()))
    return artifacts


def _default_public_dir(out_dir: Path) -> Optional[Path]:
    # Vite layout: dist/ next to public/
    candidate = out_dir.resolve().parent / "public"
    return candidate if candidate.is_dir() else None


def build_config(args) -> PluginConfig:
    config = PluginConfig.from_env().override(
        logging=True if args.logging else None,
        include_public=False if args.no_public else None,
        enforce=getattr(args, "enforce", None),
        public_dir=args.public_dir,
        compresslevel=getattr(args, "compresslevel", None),
        unique_identifiers=True if getattr(args, "unique_identifiers", False) else None,
        strict=True if getattr(args, "strict", False) else None,
        template=getattr(args, "template", None),
        jobs=getattr(args, "jobs", None),
    )
    if config.public_dir is None and config.include_public:
        config = config.override(public_dir=_default_public_dir(args.out_dir))
    return config


def cmd_build(args) -> int:
    config = build_config(args)
    try:
        result = run_build(args.out_dir, collect_artifacts(args.out_dir), config)
    except BuildError as e:
        log_error(f"Build failed: {e}")
        return 1
    return 0 if result.ok else 1


def cmd_serve(args) -> int:
    config = build_config(args)
    context = BuildContext(args.out_dir, config)
    context.register(collect_artifacts(args.out_dir))
    if config.include_public and config.public_dir is not None:
        context.register_public(config.public_dir)
    PreviewServer(context.registry.snapshot()).run(host=args.host, port=args.port)
    return 0


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="espstatic",
        description="Embed a web build into an ESP32 static files header",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def common(p):
        p.add_argument("out_dir", type=Path, help="Web build output directory (e.g. dist/)")
        p.add_argument(
            "--public-dir", type=Path, default=None,
            help="Static passthrough directory (default: ../public next to OUT_DIR, if present)",
        )
        p.add_argument("--no-public", action="store_true", help="Skip the passthrough directory")
        p.add_argument("--logging", action="store_true", help="Print a line per processed file")

    build = sub.add_parser("build", help="Generate _esp32/static_files.h")
    common(build)
    build.add_argument("--strict", action="store_true",
                       help="Fail when a file has no MIME type or the template fails")
    build.add_argument("--unique-identifiers", action="store_true",
                       help="Suffix colliding identifiers with _2, _3, ...")
    build.add_argument("--template", type=Path, default=None, help="Custom Jinja2 template")
    build.add_argument("--compresslevel", type=int, default=None, help="gzip level 1-9 (default: 9)")
    build.add_argument("--jobs", type=int, default=None, help="Compression worker threads (default: 1)")
    build.add_argument("--enforce", choices=ENFORCE_TIERS, default=None,
                       help="Invocation tier hint passed to the host build tool")
    build.set_defaults(func=cmd_build)

    serve = sub.add_parser("serve", help="Serve the assets as the firmware would")
    common(serve)
    serve.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve.add_argument("--port", type=int, default=8080, help="Port to run server on (default: 8080)")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = make_parser().parse_args(argv)

    if not args.out_dir.is_dir():
        print(f"Error: Build output directory not found: {args.out_dir}")
        return 1

    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
