"""Command-line interface for the folder-uploader tool."""

import asyncio
import logging
import os
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from folder_uploader.config import ENV_TEMPLATE, Config
from folder_uploader.display import RichProgressReporter, print_banner
from folder_uploader.exceptions import (
    ConfigError,
    FolderUploadError,
    NoRootsFoundError,
)
from folder_uploader.models import RunReport
from folder_uploader.pipeline import UploadPipeline

logger: logging.Logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str, console: Optional[Console] = None) -> None:
    """Configure rich-based logging for the application."""
    rejected: Optional[str] = None
    if level.upper() not in LOG_LEVELS:
        rejected, level = level, "INFO"
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    # Silence noisy loggers
    for logger_name in ["botocore", "aiobotocore", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
    if rejected is not None:
        logger.warning(
            f"Invalid LOG_LEVEL '{rejected}', expected one of "
            f"{', '.join(LOG_LEVELS)}. Falling back to INFO."
        )


async def main_async(config: Config, console: Console) -> RunReport:
    """
    Asynchronously execute the upload pipeline.

    Args:
        config (Config): The application configuration.
        console (Console): The console progress is rendered on.

    Returns:
        RunReport: The final report of the run.
    """
    reporter: RichProgressReporter = RichProgressReporter(config, console)
    pipeline: UploadPipeline = UploadPipeline(config, events=reporter)
    try:
        return await pipeline.run()
    finally:
        reporter.close()


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
def cli() -> None:
    """
    Upload local folders to an S3 bucket.

    Every file under the configured folders is uploaded with public-read
    access, keeping its path relative to the base directory as the object
    key. Uploads run in fixed-size concurrent groups and failed uploads are
    retried with a constant delay.

    Credentials, the bucket and tuning values are read from environment
    variables or a .env file in the working directory.
    """
    load_dotenv()
    console: Console = Console()
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"), console)

    try:
        config: Config = Config()
    except ConfigError as e:
        logger.critical(f"Configuration error: {e}")
        click.echo(ENV_TEMPLATE, err=True)
        sys.exit(1)

    print_banner(console, config)
    try:
        report: RunReport = asyncio.run(main_async(config, console))
        logger.info(
            f"✅ Run completed: {report.uploaded} uploaded, {report.failed} failed."
        )
    except NoRootsFoundError as e:
        logger.critical(f"Error: {e}")
        sys.exit(1)
    except FolderUploadError as e:
        logger.critical(f"A critical application error occurred: {e}")
        sys.exit(1)
    except asyncio.CancelledError:
        logger.warning("Shutdown signal received. Exiting.")
        sys.exit(1)
    except Exception:
        logger.critical(
            "An unexpected error caused the application to fail:", exc_info=True
        )
        sys.exit(1)


if __name__ == "__main__":
    cli()
