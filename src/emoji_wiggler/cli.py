"""CLI interface for emoji-wiggler."""

import asyncio
import logging
import random
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .animation.models import AnimationParameters, SourceImage
from .animation_pipeline import run_pipeline
from .constants import (
    DEFAULT_FRAME_COUNT,
    DEFAULT_FRAME_INTERVAL_MS,
    DEFAULT_IMAGE_SCALE,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_SIZE_BUDGET_BYTES,
    DEFAULT_WIGGLE_INTENSITY,
)
from .controller import ControllerState, ControllerStatus, RegenerationController
from .decoding import load_image
from .errors import BudgetUnreachableError, WigglerError
from .output import GifDataUrlOutputProvider, resolve_output_provider, to_data_url
from .output.encoder import EncodedArtifact

# Load environment variables from .env file
load_dotenv()

console = Console()
err_console = Console(stderr=True)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""
    pass


def main(
    image: Path = typer.Argument(..., help="Image to animate (PNG, JPEG, GIF, WebP or BMP)"),
    out: str = typer.Option(
        None,
        "--output",
        "-out",
        "-o",
        help="Write the animated GIF to this file",
    ),
    write_dataurl_to: str = typer.Option(
        None,
        "--write-dataurl-to",
        help="Write the GIF as a data URL img tag into this text file",
    ),
    frames: int = typer.Option(
        DEFAULT_FRAME_COUNT, "--frames", "-f", min=1,
        envvar="WIGGLER_FRAMES", help="Number of frames in one loop",
    ),
    interval_ms: int = typer.Option(
        DEFAULT_FRAME_INTERVAL_MS, "--interval-ms", min=1,
        envvar="WIGGLER_INTERVAL_MS", help="Milliseconds each frame is shown",
    ),
    intensity: float = typer.Option(
        DEFAULT_WIGGLE_INTENSITY, "--intensity", "-i", min=0.0,
        envvar="WIGGLER_INTENSITY", help="How far the image moves",
    ),
    scale: float = typer.Option(
        DEFAULT_IMAGE_SCALE, "--scale", min=0.0, max=1.0,
        envvar="WIGGLER_SCALE", help="Image size relative to the canvas, in (0, 1]",
    ),
    max_dimension: int = typer.Option(
        DEFAULT_MAX_DIMENSION, "--max-dimension", min=1,
        envvar="WIGGLER_MAX_DIMENSION", help="Largest canvas side in pixels",
    ),
    max_bytes: int = typer.Option(
        DEFAULT_SIZE_BUDGET_BYTES, "--max-bytes", min=1,
        envvar="WIGGLER_MAX_BYTES", help="Size ceiling for the GIF in bytes",
    ),
    seed: int | None = typer.Option(
        None, "--seed",
        envvar="WIGGLER_SEED", help="Seed for a reproducible wiggle",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging",
    ),
) -> None:
    """
    Make an image wiggle and save it as a looping GIF.

    Examples:
      # Write cat-wiggling.gif next to the input
      emoji-wiggler cat.png

      # Small, fast Slack emoji
      emoji-wiggler cat.png -o cat.gif --max-dimension 64 --max-bytes 65536

      # Inject into a README at the <!-- emoji-wiggler --> marker
      emoji-wiggler cat.png --write-dataurl-to README.md
    """
    _configure_logging(verbose)
    try:
        if out and write_dataurl_to:
            raise CLIError(
                "Cannot specify both --output and --write-dataurl-to. Choose one."
            )
        if not out and not write_dataurl_to:
            out = f"{image.stem}-wiggling.gif"
        if out:
            _validate_output_path(out)

        params = _build_parameters(frames, interval_ms, intensity, scale, max_dimension, max_bytes)
        source = _load_source(image)
        artifact = _generate(source, params, seed)

        if write_dataurl_to:
            console.print(f"[bold blue]Injecting into {write_dataurl_to}...[/bold blue]")
            GifDataUrlOutputProvider(write_dataurl_to).write(to_data_url(artifact.data))
            console.print(f"[green]✓[/green] Data URL written to {write_dataurl_to}")
        else:
            console.print(f"[bold blue]Saving to {out}...[/bold blue]")
            resolve_output_provider(out).write(artifact.data)
            console.print(
                f"[green]✓[/green] GIF saved to {out} "
                f"({artifact.size_bytes} bytes, {artifact.palette_colors} colours)"
            )

    except CLIError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    except Exception as e:
        err_console.print(f"[bold red]Unexpected error:[/bold red] {e}")
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _validate_output_path(output_path: str) -> None:
    try:
        resolve_output_provider(output_path)
    except ValueError as exc:
        raise CLIError(str(exc))


def _build_parameters(
    frames: int,
    interval_ms: int,
    intensity: float,
    scale: float,
    max_dimension: int,
    max_bytes: int,
) -> AnimationParameters:
    try:
        return AnimationParameters(
            frame_count=frames,
            frame_interval_ms=interval_ms,
            wiggle_intensity=intensity,
            image_scale=scale,
            target_max_dimension=max_dimension,
            size_budget_bytes=max_bytes,
        )
    except ValueError as exc:
        raise CLIError(f"Invalid parameters: {exc}")


def _load_source(path: Path) -> SourceImage:
    console.print(f"[bold blue]Loading {path}...[/bold blue]")
    try:
        return load_image(path)
    except WigglerError as e:
        raise CLIError(str(e))


def _generate(source: SourceImage, params: AnimationParameters, seed: int | None) -> EncodedArtifact:
    """Run one generation through the controller and return its artifact."""
    uniform = random.Random(seed).uniform if seed is not None else None
    console.print(
        f"\n[bold blue]Generating {params.frame_count} frames "
        f"at {params.frame_interval_ms}ms...[/bold blue]"
    )
    state = asyncio.run(_run_controller(source, params, uniform))

    if state.status is ControllerStatus.DONE and state.artifact is not None:
        return state.artifact
    if isinstance(state.error, BudgetUnreachableError):
        raise CLIError(f"{state.error.args[0]} (try --frames or --max-dimension)")
    if state.error is not None:
        raise CLIError(f"Failed to generate output: {state.error}")
    raise CLIError(f"Generation ended in state {state.status}")


async def _run_controller(source: SourceImage, params: AnimationParameters, uniform) -> ControllerState:
    async def pipeline(src, run_params, token):
        return await run_pipeline(src, run_params, token, uniform=uniform)

    controller = RegenerationController(pipeline, params=params)
    controller.add_listener(_report_state)
    try:
        controller.request_generation(source, params).close()
        return await controller.wait_until_settled()
    finally:
        await controller.aclose()


def _report_state(state: ControllerState) -> None:
    if state.status is ControllerStatus.RUNNING:
        console.print(f"[dim]Run {state.run_id} started[/dim]")


app = typer.Typer()
app.command()(main)

if __name__ == "__main__":
    app()
