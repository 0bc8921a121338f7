"""Command-line tool for inspecting a client configuration."""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Callable, Iterable, Mapping, Optional

import yaml
from rich.console import Console
from rich.table import Table

from .config import Config
from .endpoint import parse_endpoint
from .errors import ConfigError
from .flags import ArgparseFlags, set_flag_values
from .loader import LoadResult, from_file, init_config
from .logging import LOG_FORMATS, LOG_LEVELS, configure_logging, get_logger

ENV_PREFIX = "UPSPIN_CONFIG_"


class CliError(Exception):
    """Raised when the CLI encounters an expected error condition."""


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="upspin-config",
        description=(
            "Inspect the Upspin client configuration. Uses UPSPIN_CONFIG_* env vars "
            "for defaults and prints JSON (default), YAML or a table. Examples: "
            "`upspin-config show`, `upspin-config --config alt value cmdflags`."
        ),
    )
    parser.add_argument(
        "--config",
        default=_env("FILE"),
        help=(
            f"Configuration file (env: {ENV_PREFIX}FILE). Relative names not found "
            "in the current directory are looked up in $HOME/upspin. "
            "Defaults to $HOME/upspin/config."
        ),
    )
    parser.add_argument(
        "--output",
        choices=["json", "yaml", "table"],
        default=_env("OUTPUT", "json"),
        help=f"Output format (env: {ENV_PREFIX}OUTPUT). Defaults to 'json'.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=list(LOG_LEVELS),
        default=_env("LOG_LEVEL", "WARNING"),
        help=f"Log verbosity level (env: {ENV_PREFIX}LOG_LEVEL).",
    )
    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=_env("LOG_FORMAT", "plain"),
        help=f"Structured logging format (env: {ENV_PREFIX}LOG_FORMAT).",
    )

    subparsers = parser.add_subparsers(dest="command", required=False)

    show = subparsers.add_parser(
        "show",
        help="Show the resolved configuration",
        description=(
            "Loads the configuration and prints user name, packing, endpoints, "
            "secrets directory and extension values. Flag values under "
            "`cmdflags: {show: ...}` apply unless given on the command line."
        ),
    )
    show.set_defaults(func=_cmd_show, needs_config=True)

    value = subparsers.add_parser(
        "value",
        help="Print a single extension value",
        description="Prints the value stored under KEY, or nothing if it is unset.",
    )
    value.add_argument("key", help="Extension key, e.g. cmdflags or tlscerts")
    value.set_defaults(func=_cmd_value, needs_config=True)

    endpoint = subparsers.add_parser(
        "endpoint",
        help="Normalize an endpoint as the configuration loader would",
        description=(
            "Parses TEXT (e.g. `dir.example.com` or `remote,store.example.com:8443`) "
            "and prints its transport and network address."
        ),
    )
    endpoint.add_argument("text", help="Endpoint text")
    endpoint.set_defaults(func=_cmd_endpoint, needs_config=False)

    return parser


def _load(args: argparse.Namespace) -> LoadResult:
    if args.config:
        return from_file(args.config)
    return init_config()


def _print_output(data: Any, output: str) -> None:
    if output == "yaml":
        yaml.safe_dump(data, sys.stdout, sort_keys=False)
    elif output == "table":
        _print_table(data, Console())
    else:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")


def _print_table(data: Any, console: Console) -> None:
    if not isinstance(data, Mapping):
        console.print(str(data))
        return
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in data.items():
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", str(sub_value))
        else:
            table.add_row(str(key), "" if value is None else str(value))
    console.print(table)


def _cmd_show(config: Config, args: argparse.Namespace) -> None:
    _print_output(config.as_dict(), args.output)


def _cmd_value(config: Config, args: argparse.Namespace) -> None:
    value = config.value(args.key)
    if value:
        sys.stdout.write(value + "\n")


def _cmd_endpoint(config: Optional[Config], args: argparse.Namespace) -> None:
    try:
        endpoint = parse_endpoint(args.text)
    except ConfigError as exc:
        raise CliError(str(exc)) from exc
    _print_output(
        {"transport": endpoint.transport.value, "net_addr": endpoint.net_addr, "endpoint": str(endpoint)},
        args.output,
    )


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(args=argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logger = get_logger("upspin.cli")
    try:
        configure_logging(args.log_level, args.log_format)
        config: Optional[Config] = None
        if args.needs_config:
            config, err = _load(args)
            if err is not None:
                sys.stderr.write(f"Warning: {err}\n")
            try:
                set_flag_values(config, args.command, ArgparseFlags(parser, args))
            except ConfigError as exc:
                logger.warning("Ignoring cmdflags: %s", exc)
            configure_logging(args.log_level, args.log_format)
        func: Callable[[Optional[Config], argparse.Namespace], None] = args.func
        func(config, args)
    except (ConfigError, CliError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
