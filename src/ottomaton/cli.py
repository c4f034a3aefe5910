"""
Command-line interface for Ottomaton (otto).
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import importlib.util
import json
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from .actions import BUNDLED_ACTIONS
from .config import get_log_level, load_options
from .engine import Ottomaton
from .errors import OttomatonError
from .state import public_state
from .version import __version__

logger = logging.getLogger("ottomaton.cli")

SCRIPT_SUFFIX = ".txt"
_CLI_OPTIONS = {"-h", "--help", "--version", "--output", "--no-bundled"}


def build_cli_parser() -> argparse.ArgumentParser:
    cli = argparse.ArgumentParser(
        prog="otto",
        description="Run line-oriented Ottomaton scripts",
        epilog="Any other --KEY VALUE option is added to the initial script state.",
    )
    cli.add_argument(
        "--version",
        action="version",
        version=f"Ottomaton {__version__} (Python {sys.version.split()[0]})",
    )
    cli.add_argument(
        "paths",
        nargs="*",
        help=f"Action libraries (Python files or module names defining ACTIONS) and {SCRIPT_SUFFIX} scripts",
    )
    cli.add_argument("--output", choices=["json", "text"], help="Print the final state after the scripts ran")
    cli.add_argument("--no-bundled", action="store_true", help="Do not register the bundled actions")
    return cli


def split_state_options(argv: List[str]) -> Tuple[List[str], Dict[str, Any]]:
    """Pull ``--KEY VALUE`` / ``--KEY=VALUE`` / ``--FLAG`` options the CLI does not know into a state dict."""
    remaining: List[str] = []
    state: Dict[str, Any] = {}
    index = 0
    while index < len(argv):
        token = argv[index]
        name, has_value, value = token.partition("=")
        if not token.startswith("--") or token == "--" or name in _CLI_OPTIONS:
            remaining.append(token)
            if name == "--output" and not has_value and index + 1 < len(argv):
                remaining.append(argv[index + 1])
                index += 1
            index += 1
            continue
        key = name[2:]
        if has_value:
            state[key] = value
        elif index + 1 < len(argv) and not argv[index + 1].startswith("--"):
            state[key] = argv[index + 1]
            index += 1
        else:
            state[key] = True
        index += 1
    return remaining, state


def _import_library_file(path: Path) -> ModuleType:
    if path.is_dir():
        path = path / "__init__.py"
    spec = importlib.util.spec_from_file_location(f"ottomaton_library_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_library(path: str, cwd: Path | None = None) -> Any:
    """Return the ``ACTIONS`` registration exported by a library file or module."""
    base = cwd or Path.cwd()
    candidate = (base / path).resolve()
    if not candidate.exists() and candidate.with_suffix(".py").exists():
        candidate = candidate.with_suffix(".py")
    if candidate.exists():
        module = _import_library_file(candidate)
    else:
        module = importlib.import_module(path)
    if not hasattr(module, "ACTIONS"):
        raise AttributeError(f"{path} does not define ACTIONS")
    return module.ACTIONS


async def run_scripts(otto: Ottomaton, scripts: List[str], state: Dict[str, Any]) -> Dict[str, Any]:
    for script in scripts:
        state = await otto.run(script, state)
    return state


def render_state(state: Dict[str, Any], output: str) -> str:
    if output == "json":
        return json.dumps(state, default=str)
    return "\n".join(f"{key} = {value}" for key, value in state.items())


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(name)s: %(message)s")
    remaining, initial_state = split_state_options(list(sys.argv[1:] if argv is None else argv))
    args = build_cli_parser().parse_args(remaining)

    try:
        otto = Ottomaton(load_options(**initial_state))
    except ValidationError as exc:
        raise SystemExit(f"ERROR: invalid options: {exc}") from exc
    if not args.no_bundled:
        otto.register(BUNDLED_ACTIONS)

    cwd = Path.cwd()
    script_paths: List[Path] = []
    for path in args.paths:
        if path.endswith(SCRIPT_SUFFIX):
            script_paths.append((cwd / path).resolve())
            continue
        logger.debug("Registering library: %s", path)
        try:
            otto.register(load_library(path, cwd))
        except Exception as exc:
            logger.debug("Unable to register library %s", path, exc_info=True)
            raise SystemExit(f'ERROR: unable to register library "{(cwd / path).resolve()}"') from exc

    scripts: List[str] = []
    for script_path in script_paths:
        if not script_path.exists():
            raise SystemExit(f"ERROR: file could not be loaded: {script_path}")
        scripts.append(script_path.read_text(encoding="utf-8"))
    if not scripts:
        scripts.append(sys.stdin.read())

    state: Dict[str, Any] = dict(initial_state)
    try:
        state = asyncio.run(run_scripts(otto, scripts, state))
    except OttomatonError as exc:
        raise SystemExit(f"ERROR: {exc}") from exc
    except Exception as exc:  # pragma: no cover - safety net for handler failures
        logger.debug("Script failed", exc_info=True)
        raise SystemExit(f"ERROR: {exc}") from exc

    if args.output:
        rendered = render_state(public_state(state, exclude=initial_state.keys()), args.output)
        if rendered:
            print(rendered)


if __name__ == "__main__":  # pragma: no cover
    main()
