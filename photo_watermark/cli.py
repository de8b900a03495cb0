"""
Photo Watermark CLI - Render the tiled text watermark onto a single image
"""

from pathlib import Path
from typing import Optional

import typer

from .config import AppConfig, configure_logging
from .errors import ExportUnavailable, WatermarkError
from .exporter import export_filename, export_surface, normalize_format
from .renderer import render
from .settings import DEFAULT_SETTINGS, WatermarkSettings
from .upload import load_path

app = typer.Typer(add_completion=False)


@app.command()
def main(
    image_path: Path = typer.Argument(..., help="Image to watermark (JPG, PNG or WebP)"),
    text: str = typer.Option(..., "--text", "-t", help="Watermark text"),
    font_size: float = typer.Option(
        DEFAULT_SETTINGS.font_size, "--font-size", "-s", help="Font size in pixels"
    ),
    opacity: float = typer.Option(
        DEFAULT_SETTINGS.opacity, "--opacity", "-a", help="Opacity between 0 and 1"
    ),
    rotation: float = typer.Option(
        DEFAULT_SETTINGS.rotation, "--rotation", "-r", help="Grid rotation in degrees (clockwise)"
    ),
    spacing: float = typer.Option(
        DEFAULT_SETTINGS.spacing, "--spacing", help="Extra gap between tiles in pixels"
    ),
    color: str = typer.Option(DEFAULT_SETTINGS.color, "--color", "-c", help="Text color"),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: png, jpeg or webp"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: watermarked.<ext> next to the input)",
    ),
):
    """
    Overlay a repeating, rotated, semi-transparent text watermark on one image.
    """
    cfg = AppConfig.load()
    configure_logging(cfg.log_level)

    try:
        out_fmt = normalize_format(fmt or cfg.default_format)
        settings = WatermarkSettings.from_mapping(
            {
                "text": text,
                "font_size": font_size,
                "opacity": opacity,
                "rotation": rotation,
                "spacing": spacing,
                "color": color,
            }
        )
        if not settings.enabled:
            raise ExportUnavailable("Watermark text must not be empty")
        source = load_path(image_path, max_bytes=cfg.max_upload_bytes)
        try:
            surface = render(source, settings, font_path=cfg.font_path)
            data = export_surface(surface, out_fmt)
        finally:
            source.close()
    except WatermarkError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    target = output or image_path.parent / export_filename(out_fmt)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        typer.echo(f"Error: cannot write {target}: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ Saved {surface.width}x{surface.height} {out_fmt} to {target}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
