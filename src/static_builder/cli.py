from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path

from static_builder.config import CONFIG_FILE, load_config
from static_builder.errors import StaticBuilderError
from static_builder.logging import get_logger, set_verbose
from static_builder.pipeline.build import build

log = get_logger()

def _report(e: StaticBuilderError) -> None:
    if e.path:
        log.error("Error while compiling %s", e.path)
    log.error("%s", e.message)

def main(argv=None) -> int:
    p = argparse.ArgumentParser(prog="static-builder")
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Build the destination tree from the source tree")
    b.add_argument("--config", default=CONFIG_FILE, help=f"Config file (default: ./{CONFIG_FILE})")
    b.add_argument("--clean", action="store_true", help="Delete existing files in the destination first")
    b.add_argument("-v", "--verbose", action="store_true", help="Log every build step")

    args = p.parse_args(argv)

    try:
        cfg = load_config(Path(args.config).expanduser())
    except StaticBuilderError as e:
        log.error("Invalid config %s: %s", args.config, e.message)
        return 1

    if args.clean:
        cfg = dataclasses.replace(cfg, clean=True)
    set_verbose(cfg.verbose or bool(args.verbose))

    try:
        stats = build(cfg)
    except StaticBuilderError as e:
        _report(e)
        return 1

    log.info(
        "done: documents=%d styles=%d scripts=%d cache_hits=%d copied=%d output=%s",
        stats.documents, stats.styles, stats.scripts, stats.cache_hits, stats.copied, cfg.destination
    )
    return 0
