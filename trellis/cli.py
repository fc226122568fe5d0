from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

from .conf import EngineConfig, load_engine_config, parse_assignments
from .engine import Engine
from .errors import ConfigurationError, TrellisUserError
from .ir import Node, dumps, fingerprint, loads
from .version import tool_version


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="trellis",
        description="Trellis (IR pipeline compiler for template languages)",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Arguments shared by the commands that build an engine
    def add_engine(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--engine",
            required=True,
            metavar="MODULE:ATTR",
            help="Engine subclass to build, e.g. mypkg.engines:HtmlEngine",
        )
        sp.add_argument(
            "--config",
            type=Path,
            help="YAML file with global 'options' and per-stage 'stages' overrides",
        )
        sp.add_argument(
            "--set",
            dest="assignments",
            action="append",
            default=[],
            metavar="[STAGE.]KEY=VALUE",
            help="option assignment; applied after --config (repeatable)",
        )

    sp_compile = sub.add_parser("compile", help="run a JSON-encoded tree through an engine")
    sp_compile.add_argument("tree", help="path to the JSON tree, or - for stdin")
    add_engine(sp_compile)

    sp_stages = sub.add_parser("stages", help="list the bound stages of an engine (JSON)")
    add_engine(sp_stages)

    sp_show = sub.add_parser("show", help="print an indented outline of a tree")
    sp_show.add_argument("tree", help="path to the JSON tree, or - for stdin")

    sp_fp = sub.add_parser("fingerprint", help="print the stable digest of a tree")
    sp_fp.add_argument("tree", help="path to the JSON tree, or - for stdin")

    return p


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get("TRELLIS_DEBUG") else logging.WARNING
    root = logging.getLogger("trellis")
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(h)


def _read_tree(arg: str) -> Node:
    if arg == "-":
        return loads(sys.stdin.read())
    path = Path(arg)
    if not path.is_file():
        raise TrellisUserError(f"tree file not found: {path}")
    return loads(path.read_text(encoding="utf-8"))


def _engine_config(ns: argparse.Namespace) -> EngineConfig:
    cfg = load_engine_config(ns.config) if ns.config else EngineConfig()
    return cfg.merged(parse_assignments(ns.assignments))


def _load_engine(ns: argparse.Namespace) -> Engine:
    module_name, _, attr = ns.engine.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"invalid --engine '{ns.engine}', expected MODULE:ATTR")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import engine module '{module_name}': {e}") from e
    target = getattr(module, attr, None)
    if not (isinstance(target, type) and issubclass(target, Engine)):
        raise ConfigurationError(f"'{ns.engine}' is not an Engine subclass")
    cfg = _engine_config(ns)
    return target(options=cfg.options, overrides=cfg.stages)


def _outline(root: Node) -> List[str]:
    lines = []
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        literals = " ".join(repr(a) for a in node.args if not isinstance(a, Node))
        lines.append(("  " * depth + f"{node.tag} {literals}").rstrip())
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return lines


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(ns.verbose)

    try:
        if ns.cmd == "compile":
            engine = _load_engine(ns)
            result = engine.run(_read_tree(ns.tree))
            if isinstance(result, Node):
                sys.stdout.write(dumps(result, indent=2) + "\n")
            else:
                sys.stdout.write(str(result))
            return 0

        if ns.cmd == "stages":
            engine = _load_engine(ns)
            sys.stdout.write(json.dumps(engine.describe(), ensure_ascii=False, indent=2, default=repr) + "\n")
            return 0

        if ns.cmd == "show":
            sys.stdout.write("\n".join(_outline(_read_tree(ns.tree))) + "\n")
            return 0

        if ns.cmd == "fingerprint":
            sys.stdout.write(fingerprint(_read_tree(ns.tree)) + "\n")
            return 0

    except TrellisUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
