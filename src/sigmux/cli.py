"""CLI entry point for sigmux."""

from __future__ import annotations

import logging
import os
import sys

import typer
from rich.console import Console
from rich.style import Style
from rich.text import Text

from sigmux.ansi.parser import parse_ansi_output
from sigmux.config import SigmuxConfig
from sigmux.palette import ColorMode, Palette

app = typer.Typer(
    name="sigmux",
    help="A terminal multiplexer: up to six shells in a two-row grid.",
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def _add_file_handler(path: str) -> None:
    handler = logging.FileHandler(os.path.expanduser(path))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    logging.getLogger().addHandler(handler)


@app.command()
def run(
    panes: int | None = typer.Option(
        None, "--panes", "-n", help="Panes to open at start (default: from config)."
    ),
    shell: str | None = typer.Option(
        None, "--shell", "-s", help="Shell command for new panes."
    ),
    light: bool = typer.Option(False, "--light", help="Start in light mode."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Open the multiplexer UI."""
    # No stderr handler here: it would corrupt the Textual display. The app
    # installs its own handler that routes records to the status bar.
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in root.handlers[:]:
        root.removeHandler(h)

    config = SigmuxConfig.load(config_file)
    if panes is not None:
        if panes < 0 or panes > config.layout.max_panes:
            typer.echo(
                f"Error: --panes must be between 0 and {config.layout.max_panes}",
                err=True,
            )
            raise typer.Exit(1)
        config.layout.initial_panes = panes
    if shell:
        config.session.shell = shell.split()
    if light:
        config.layout.dark_mode = False
    if config.log_file:
        _add_file_handler(config.log_file)

    from sigmux.tui.app import SigmuxApp

    SigmuxApp(config).run()


@app.command()
def parse(
    path: str | None = typer.Argument(
        None, help="File with captured terminal output (default: stdin)."
    ),
    hue: float = typer.Option(180.0, "--hue", help="Accent hue for the palette."),
    segments: bool = typer.Option(
        False, "--segments", help="List segments instead of rendering them."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
) -> None:
    """Decode ANSI output the way a pane would and print it."""
    setup_logging(verbose)

    if path is None:
        raw = sys.stdin.read()
    elif not os.path.isfile(path):
        typer.echo(f"Error: File not found: {path}", err=True)
        raise typer.Exit(1)
    else:
        with open(path, encoding="utf-8", errors="replace") as f:
            raw = f.read()

    palette = Palette.from_hue(hue)
    default_color = palette.text(ColorMode.DARK)
    parsed = parse_ansi_output(raw, palette, default_color)

    console = Console()
    if segments:
        for seg in parsed:
            weight = "bold" if seg.bold else "normal"
            console.print(f"{seg.color.hex} {weight} {seg.text!r}", markup=False)
        return

    text = Text()
    for seg in parsed:
        text.append(seg.text, Style(color=seg.color.rich_color, bold=seg.bold))
    console.print(text)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
