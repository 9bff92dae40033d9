"""Command-line entry point: inspect one video and print its summary."""

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import click

from videoinspector.common.logging import configure_logging
from videoinspector.common.settings import Settings, get_settings
from videoinspector.domain.entities.inspection import InspectionResult
from videoinspector.domain.errors import InspectionError
from videoinspector.services.inspection.service import InspectionContext, InspectionService

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp"}


def _with_timeout(cfg: Settings, timeout: float | None) -> Settings:
    if timeout is None:
        return cfg
    return cfg.model_copy(
        update={
            "ffprobe": cfg.ffprobe.model_copy(update={"timeout_sec": timeout}),
            "ffmpeg": cfg.ffmpeg.model_copy(update={"timeout_sec": timeout}),
        }
    )


def format_human(result: InspectionResult) -> str:
    rows = [
        ("File", result.file_path),
        ("Resolution", result.resolution),
        ("Frame rate", f"{result.frame_rate} fps"),
        ("Duration", result.duration),
        ("Bit rate", result.bit_rate),
        ("File size", result.file_size),
        ("SHA-256", result.file_hash),
        ("Thumbnails", str(len(result.thumbnails))),
    ]
    width = max(len(k) for k, _ in rows)
    return "\n".join(f"{k.ljust(width)}  {v}" for k, v in rows)


def write_thumbnails(result: InspectionResult, out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for i, thumb in enumerate(result.thumbnails):
        ext = _EXTENSIONS.get(thumb.mime_type, "bin")
        p = out_dir / f"thumb_{i}.{ext}"
        p.write_bytes(thumb.data)
        written.append(p)
    return written


@click.command("inspect")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
@click.option(
    "--thumbnails-dir",
    "-t",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write the decoded thumbnails into this directory",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-tool timeout in seconds (overrides FFPROBE__TIMEOUT_SEC / FFMPEG__TIMEOUT_SEC)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log tool invocations")
def main(file: str, output_format: str, thumbnails_dir: Path | None, timeout: float | None, verbose: bool) -> None:
    """Inspect FILE and print resolution, frame rate, duration, bit rate, size and digest."""
    cfg = _with_timeout(get_settings(), timeout)
    configure_logging("DEBUG" if verbose else cfg.log_level)
    service = InspectionService(InspectionContext.from_settings(cfg))

    # Run off the main thread so Ctrl-C can cancel the in-flight tool cleanly.
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="inspect-cli") as pool:
        fut = pool.submit(service.inspect, file, cancel)
        try:
            result = fut.result()
        except KeyboardInterrupt:
            cancel.set()
            fut.exception()
            raise click.Abort()
        except InspectionError as e:
            raise click.ClickException(f"{e.kind}: {e}") from e

    if output_format == "json":
        click.echo(json.dumps(result.as_dict(), indent=2))
    else:
        click.echo(format_human(result))

    if thumbnails_dir is not None:
        for p in write_thumbnails(result, thumbnails_dir):
            click.echo(f"wrote {p}", err=True)


if __name__ == "__main__":
    main()
