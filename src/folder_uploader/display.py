"""
Console rendering of progress events.

`RichProgressReporter` is the event sink used by the command-line interface:
a spinner while scanning, a progress bar while uploading and a summary with
example access URLs once the run completes.
"""

import threading
import time
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.rule import Rule
from rich.status import Status

from folder_uploader.config import Config
from folder_uploader.events import (
    Event,
    FolderSkipped,
    ItemCompleted,
    RunCompleted,
    ScanCompleted,
    ScanStarted,
)
from folder_uploader.models import RunReport
from folder_uploader.storage import public_url


def print_banner(console: Console, config: Config) -> None:
    """Prints the run parameters before anything else happens."""
    console.print("[bold blue]S3 Bulk Folder Uploader[/]")
    console.print(Rule(style="grey50"))
    console.print(f"Bucket: [yellow]{config.destination.bucket}[/]")
    console.print(f"Region: [yellow]{config.destination.region}[/]")
    console.print(f"Folders to Upload: [yellow]{', '.join(config.app.roots)}[/]")
    console.print(f"Concurrency: [yellow]{config.app.concurrency}[/]")
    console.print(Rule(style="grey50"))


class RichProgressReporter:
    """An event sink that renders a run with rich."""

    def __init__(self, config: Config, console: Optional[Console] = None) -> None:
        """
        Initializes the reporter.

        Args:
            config (Config): Used to derive the public URLs in the summary.
            console (Console, optional): The console to draw on.
        """
        self._config: Config = config
        self._console: Console = console or Console()
        self._lock: threading.Lock = threading.Lock()
        self._status: Optional[Status] = None
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None
        self._started_at: float = 0.0

    def emit(self, event: Event) -> None:
        with self._lock:
            if isinstance(event, ScanStarted):
                self._status = self._console.status("Scanning folders for files...")
                self._status.start()
            elif isinstance(event, FolderSkipped):
                self._console.print(
                    f"[yellow]Warning: Folder '{event.name}' does not exist "
                    "and will be skipped.[/]"
                )
            elif isinstance(event, ScanCompleted):
                self._on_scan_completed(event)
            elif isinstance(event, ItemCompleted):
                self._on_item_completed(event)
            elif isinstance(event, RunCompleted):
                self._on_run_completed(event.report)

    def close(self) -> None:
        """Stops any live spinner or progress bar that is still running."""
        with self._lock:
            self._stop_live()

    def _stop_live(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None

    def _on_scan_completed(self, event: ScanCompleted) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
        self._console.print(
            f"[green]✓[/] Found [green]{event.count}[/] files to upload from "
            f"{len(self._config.app.roots)} folders"
        )
        if event.count == 0:
            return

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            TextColumn("Speed: {task.fields[speed]} files/s"),
            console=self._console,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(
            "Uploading", total=event.count, speed=0
        )
        self._started_at = time.monotonic()

    def _on_item_completed(self, event: ItemCompleted) -> None:
        if self._progress is None or self._task_id is None:
            return
        elapsed: float = time.monotonic() - self._started_at
        speed: int = round(event.uploaded / elapsed) if elapsed > 0 else 0
        self._progress.update(self._task_id, advance=1, speed=speed)
        if not event.outcome.succeeded:
            self._progress.console.print(
                f"[red]Failed to upload "
                f"{escape(str(event.outcome.task.absolute_path))}:[/] "
                f"{escape(event.outcome.reason or '')}"
            )

    def _on_run_completed(self, report: RunReport) -> None:
        self._stop_live()
        if report.total == 0:
            self._console.print("[yellow]No files found to upload.[/]")
            return

        console: Console = self._console
        console.print(Rule(style="grey50"))
        console.print("[bold green]✓ Upload Complete[/]")
        console.print(f"Total Files: {report.total}")
        console.print(f"Uploaded: [green]{report.uploaded}[/]")
        console.print(f"Failed: [red]{report.failed}[/]")
        console.print(f"Duration: {round(report.duration_seconds)} seconds")
        console.print(
            f"Average Speed: {round(report.throughput_files_per_second)} files/second"
        )

        bucket_url: str = public_url(self._config.destination)
        console.print(Rule(style="grey50"))
        console.print("[bold blue]Access Information:[/]")
        console.print(f"Public URL prefix: [green]{bucket_url}[/]")
        console.print("[bold]Example URLs for uploaded folders:[/]")
        for root in report.roots:
            console.print(
                f"{root}: [green]{public_url(self._config.destination, root + '/')}[/]"
            )
        if report.sample_key is not None:
            console.print(
                "Example file URL: "
                f"[green]{public_url(self._config.destination, report.sample_key)}[/]"
            )
