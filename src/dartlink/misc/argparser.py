from __future__ import annotations

from argparse import ArgumentParser, ArgumentTypeError
from typing import TYPE_CHECKING, NamedTuple, cast

from rich_argparse import RichHelpFormatter

from .logging_conf import LOG_ABBREV_2_LVL, LOG_LVL_2_COLOR

if TYPE_CHECKING:
    from .logging_conf import LogLvl


def _positive_float(raw: str) -> float:
    try:
        val = float(raw)
    except ValueError as e:
        msg = f"not a number: {raw}"
        raise ArgumentTypeError(msg) from e

    if not val > 0:
        msg = f"must be > 0: {raw}"
        raise ArgumentTypeError(msg)

    return val


def _port(raw: str) -> int:
    try:
        val = int(raw)
    except ValueError as e:
        msg = f"not an integer: {raw}"
        raise ArgumentTypeError(msg) from e

    if not 1 <= val <= 65535:  # noqa: PLR2004
        msg = f"out of range: {raw}"
        raise ArgumentTypeError(msg)

    return val


def _mk_parser() -> ArgumentParser:
    RichHelpFormatter.usage_markup = True
    RichHelpFormatter.styles.update(
        {
            "argparse.args": "cyan",
            "argparse.groups": "green bold",
            "argparse.metavar": "dim cyan",
            "argparse.usage": "dim cyan",
            "argparse.prog": "cyan bold",
        },
    )

    parser = ArgumentParser(
        description="Bridge an Autodarts board manager to MQTT",
        formatter_class=RichHelpFormatter,
        usage="%(prog)s [cyan]\\[options][/]",
    )

    arg = parser.add_argument

    arg("-H", "--host", default="127.0.0.1", help="board manager host (default: [yellow]127.0.0.1[/])", metavar="H")
    arg(
        "-p",
        "--port",
        type=_port,
        default=3180,
        help="board manager port (default: [yellow]3180[/])",
        metavar="P",
    )
    arg(
        "-i",
        "--interval",
        type=_positive_float,
        default=1.0,
        help="poll interval in seconds while the board is online (default: [yellow]1.0[/])",
        metavar="SECS",
    )
    arg(
        "--serve-tools",
        action="store_true",
        help="serve the tools callback endpoint on [cyan]TOOLS_PORT[/]",
    )

    log_lvl_choices = ", ".join(
        f"[{clr}]{abbr}[/]" for abbr, clr in zip(LOG_ABBREV_2_LVL, LOG_LVL_2_COLOR.values(), strict=True)
    )

    arg(
        "-l",
        "--log-level",
        type=str,
        default="INF",
        help=f"base logging level (default: [yellow]INF[/])\t[{log_lvl_choices}]",
        choices=LOG_ABBREV_2_LVL,
        dest="log_level",
        metavar="L",
    )
    return parser


class _Args(NamedTuple):
    host: str
    port: int
    interval: float
    serve_tools: bool
    log_level: LogLvl


def get_cli_args(argv: list[str] | None = None) -> _Args:
    """Create & return parsed arguments."""

    parser = _mk_parser()
    args = parser.parse_args(argv)

    return _Args(
        host=args.host,
        port=args.port,
        interval=args.interval,
        serve_tools=args.serve_tools,
        log_level=LOG_ABBREV_2_LVL[cast("str", args.log_level)],
    )
