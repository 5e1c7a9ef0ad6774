"""Command-line interface for Lox: run a script or start a REPL."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lox import RunResult, run
from lox.errors import ErrorReporter
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter, InterpreterOptions

# sysexits.h conventions
EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

CONFIG_FILENAME = "lox.toml"


class ConfigError(Exception):
    """Raised when the config file exists but cannot be used."""


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    script: Path | None
    max_call_depth: int
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="lox",
        description="Tree-walking interpreter for the Lox scripting language",
    )
    p.add_argument("script", nargs="?", help="Script to run (default: interactive prompt)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_FILENAME})",
    )
    p.add_argument(
        "--max-call-depth",
        type=int,
        default=None,
        metavar="N",
        help=f"Maximum nesting of function calls (default: {DEFAULT_MAX_CALL_DEPTH})",
    )
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    return p


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from None


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    script = Path(args.script) if args.script else None
    base_dir = Path(".")
    if script is not None and script.parent.parts:
        base_dir = script.parent

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, base_dir)

    max_call_depth = DEFAULT_MAX_CALL_DEPTH
    cfg_interp = config.get("interpreter")
    if isinstance(cfg_interp, dict):
        cfg_depth = cfg_interp.get("max_call_depth")
        if cfg_depth is not None:
            if not isinstance(cfg_depth, int) or isinstance(cfg_depth, bool):
                raise ConfigError("interpreter.max_call_depth must be an integer")
            max_call_depth = cfg_depth
    if args.max_call_depth is not None:
        max_call_depth = args.max_call_depth
    if max_call_depth < 1:
        raise ConfigError("max_call_depth must be at least 1")

    debug = bool(config.get("debug", False)) or args.debug

    return CliOptions(script=script, max_call_depth=max_call_depth, debug=debug)


def _interpreter_options(options: CliOptions) -> InterpreterOptions:
    return InterpreterOptions(max_call_depth=options.max_call_depth)


def _dump(source: str) -> None:
    from lox.debug import dump_ast
    from lox.parser import parse

    dump_ast(parse(source, ErrorReporter(echo=False)), file=sys.stderr)


def exit_code(result: RunResult) -> int:
    """Map a run outcome to the process exit status."""
    if result.had_error:
        return EX_DATAERR
    if result.had_runtime_error:
        return EX_SOFTWARE
    return EX_OK


def run_file(options: CliOptions) -> int:
    """Read and run a whole script, returning its exit status."""
    assert options.script is not None
    try:
        source = options.script.read_text(encoding="utf-8")
    except OSError as exc:
        print(f"error: cannot read {options.script}: {exc.strerror}", file=sys.stderr)
        return EX_NOINPUT

    if options.debug:
        _dump(source)

    return exit_code(run(source, options=_interpreter_options(options)))


def repl(options: CliOptions) -> int:
    """Read-eval-print loop sharing one interpreter across lines."""
    interpreter = Interpreter(ErrorReporter(), options=_interpreter_options(options))
    while True:
        try:
            line = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return EX_OK
        if options.debug:
            _dump(line)
        # Errors are already reported; the prompt just carries on
        run(line, interpreter=interpreter)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns an exit code. Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EX_USAGE

    if options.script is None:
        return repl(options)
    return run_file(options)
