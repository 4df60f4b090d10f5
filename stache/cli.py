from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .config import apply_config, find_config, load_config, setup_logging
from .errors import StacheUserError
from .jsonic import dumps as jdumps
from .manager import Stache
from .template.escaping import no_escape
from .template.tokens import TokenSequence, dump_tokens
from .version import tool_version

_yaml = YAML(typ="safe")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="stache",
        description="Mustache template renderer",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--verbose", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Shared by render/tokens
    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "template",
            help="template file path, or template name looked up in --path directories",
        )
        sp.add_argument(
            "--path",
            action="append",
            metavar="DIR",
            help="template directory (may be repeated; later ones are searched first)",
        )
        sp.add_argument(
            "--config",
            metavar="FILE",
            help="configuration file (default: ./stache.yaml when present)",
        )
        sp.add_argument(
            "--suffix",
            help="template file suffix for name lookups (default: mustache)",
        )

    sp_render = sub.add_parser("render", help="render a template to stdout")
    add_common(sp_render)
    sp_render.add_argument(
        "--data",
        metavar="FILE|-",
        help="view data as YAML or JSON; '-' reads stdin",
    )
    sp_render.add_argument(
        "--partial",
        action="append",
        metavar="ALIAS=FILE",
        help="aliased partial (may be repeated)",
    )
    sp_render.add_argument("--raw", action="store_true", help="disable HTML escaping")

    sp_tokens = sub.add_parser("tokens", help="dump the token tree as JSON")
    add_common(sp_tokens)

    return p


def _make_manager(ns: argparse.Namespace) -> Stache:
    manager = Stache()
    config_path = Path(ns.config) if ns.config else find_config(Path.cwd())
    if config_path is not None:
        apply_config(manager, load_config(config_path))

    resolver = manager.default_resolver
    if ns.suffix is not None:
        resolver.suffix = ns.suffix
    for path in ns.path or []:
        try:
            resolver.add_template_path(path)
        except ValueError as e:
            raise StacheUserError(str(e)) from e

    if getattr(ns, "raw", False):
        manager.renderer.set_escaper(no_escape)
    return manager


def _load_tokens(manager: Stache, target: str) -> TokenSequence:
    """A path to an existing file is compiled as text; anything else is a template name."""
    path = Path(target)
    if path.is_file():
        return manager.compile(path.read_text(encoding="utf-8"), target)
    return manager.tokenize(target)


def _parse_partials(manager: Stache, specs: Optional[List[str]]) -> Dict[str, TokenSequence]:
    result: Dict[str, TokenSequence] = {}
    for spec in specs or []:
        if "=" not in spec:
            raise ValueError(f"Invalid partial format '{spec}'. Expected 'alias=file'")
        alias, file_name = spec.split("=", 1)
        alias = alias.strip()
        file_path = Path(file_name.strip())
        if not file_path.is_file():
            raise ValueError(f"Partial file not found: {file_path}")
        result[alias] = manager.compile(file_path.read_text(encoding="utf-8"), alias)
    return result


def _parse_data(data_arg: Optional[str]) -> Any:
    """
    Reads the view from a YAML/JSON file or stdin ('-').

    No --data means an empty view.
    """
    if not data_arg:
        return {}
    if data_arg == "-":
        text = sys.stdin.read()
        source = "stdin"
    else:
        file_path = Path(data_arg)
        if not file_path.exists():
            raise ValueError(f"Data file not found: {file_path}")
        text = file_path.read_text(encoding="utf-8")
        source = str(file_path)
    try:
        data = _yaml.load(text)
    except YAMLError as e:
        raise ValueError(f"Failed to parse data from {source}: {e}") from e
    return {} if data is None else data


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    setup_logging(ns.verbose)

    try:
        manager = _make_manager(ns)

        if ns.cmd == "render":
            view = _parse_data(ns.data)
            partials = _parse_partials(manager, ns.partial)
            tokens = _load_tokens(manager, ns.template)
            sys.stdout.write(manager.renderer.render(tokens, view, partials))
            return 0

        if ns.cmd == "tokens":
            tokens = _load_tokens(manager, ns.template)
            sys.stdout.write(jdumps(dump_tokens(tokens), indent=2) + "\n")
            return 0

    except StacheUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
