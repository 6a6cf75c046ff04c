"""
Command-Line Interface

Captures a website screenshot, sends it to a vision model for design
critique and prints the result as a rich report or JSON. Exit codes
distinguish failure classes so scripts can branch on them.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .analyzer import VisionAnalyzer
from .capture import ScreenshotCapturer
from .config import load_config, resolve_api_key
from .errors import DesignFeedbackError, ExitCode, describe_failure, exit_code_for
from .formatters import format_json, format_text, render_text, write_output
from .log import configure_logging
from .models import AnalysisFailure, AnalysisOutcome, ViewportSize
from .providers import PROVIDER_NAMES, get_provider
from .service import WebsiteReviewer
from .validation import (
    validate_format,
    validate_quality,
    validate_url,
    validate_viewport,
    validate_wait_time,
)


console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


@click.command()
@click.argument('url', required=False)
@click.option(
    '-v', '--viewport',
    default='desktop',
    show_default=True,
    help='Viewport preset (mobile, tablet, desktop) or custom WIDTHxHEIGHT'
)
@click.option(
    '-o', '--output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Where to save the screenshot (kept after analysis)'
)
@click.option(
    '-f', '--format', 'output_format',
    default='text',
    type=click.Choice(['text', 'json'], case_sensitive=False),
    help='Output format: text (terminal report) or json (for scripts)'
)
@click.option(
    '-w', '--wait',
    default=0,
    type=int,
    help='Seconds to wait before capturing (0-60)'
)
@click.option(
    '--wait-for',
    default=None,
    help='CSS selector to wait for before capture'
)
@click.option(
    '--full-page/--no-full-page',
    default=True,
    help='Capture the full scrollable page or just the viewport'
)
@click.option(
    '--quality',
    default=90,
    type=int,
    help='JPEG quality 0-100 (ignored for PNG)'
)
@click.option(
    '--api-key',
    default=None,
    help='API key for the vision provider (overrides environment and config file)'
)
@click.option(
    '--provider',
    default=None,
    type=click.Choice(list(PROVIDER_NAMES), case_sensitive=False),
    help='Vision provider to use. Defaults to VISION_PROVIDER from .env'
)
@click.option(
    '--model',
    default=None,
    help='Vision model to use. Defaults to VISION_MODEL or the provider default'
)
@click.option(
    '--timeout',
    default=None,
    type=click.FloatRange(min=5, max=600),
    help='Seconds allowed per analysis attempt. Defaults to VISION_TIMEOUT'
)
@click.option(
    '--save',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Also write the rendered output to this file'
)
@click.option(
    '--env-file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to .env file (defaults to ./.env)'
)
@click.option(
    '--verbose',
    is_flag=True,
    default=False,
    help='Show debug logging'
)
@click.version_option(version=__version__)
def main(
    url: Optional[str],
    viewport: str,
    output: Optional[Path],
    output_format: str,
    wait: int,
    wait_for: Optional[str],
    full_page: bool,
    quality: int,
    api_key: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    timeout: Optional[float],
    save: Optional[Path],
    env_file: Optional[Path],
    verbose: bool
):
    """
    Design Feedback - AI design critique for websites

    Captures a screenshot of URL and asks a vision model for a critique of
    its layout, navigation, accessibility and visual design.

    Examples:

      # Desktop critique as a terminal report
      design-feedback https://example.com

      # Mobile viewport, keep the screenshot
      design-feedback example.com -v mobile -o shots/mobile.png

      # JSON output for scripts
      design-feedback https://example.com --format json --save review.json
    """
    configure_logging(verbose)

    try:
        # Validate input before any browser or network work
        target_url = validate_url(url)
        size = validate_viewport(viewport)
        wait_seconds = validate_wait_time(wait)
        jpeg_quality = validate_quality(quality)
        fmt = validate_format(output_format)

        # Load configuration and credentials
        config = load_config(env_file)
        provider_name = (provider or config.vision_provider).lower()
        key = resolve_api_key(
            provider_name,
            config,
            explicit_key=api_key,
            interactive=sys.stdin.isatty()
        )

        vision = get_provider(provider_name, config, api_key=key, model=model)
        policy = config.retry_policy()
        if timeout is not None:
            policy = policy.model_copy(update={"timeout": timeout})

        reviewer = WebsiteReviewer(VisionAnalyzer(vision, policy), ScreenshotCapturer())

        outcome = asyncio.run(_run_review(
            reviewer,
            url=target_url,
            viewport=size,
            api_key=key,
            structured=fmt == 'json',
            output_path=output,
            wait_seconds=wait_seconds,
            wait_for=wait_for,
            full_page=full_page,
            quality=jpeg_quality
        ))

        if isinstance(outcome, AnalysisFailure):
            _report_failure(outcome, verbose)
            sys.exit(exit_code_for(outcome.kind))

        # Output result
        if fmt == 'json':
            rendered = format_json(outcome.analysis, outcome.extraction)
            click.echo(rendered)
        else:
            render_text(outcome.analysis, console)
            rendered = format_text(outcome.analysis)

        if save:
            saved = write_output(rendered, save)
            err_console.print(f"[green]Output saved to {escape(str(saved))}[/green]")

    except DesignFeedbackError as e:
        logger.debug("%s raised, exiting with %d", type(e).__name__, e.exit_code)
        err_console.print(f"[red]Error: {escape(e.user_message())}[/red]")
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)
    except Exception as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            err_console.print_exception()
        sys.exit(ExitCode.GENERAL_ERROR)


async def _run_review(
    reviewer: WebsiteReviewer,
    url: str,
    viewport: ViewportSize,
    **options
) -> AnalysisOutcome:
    """Run the review with a progress indicator on stderr"""

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True
    ) as progress:
        progress.add_task(
            f"[cyan]Analyzing {escape(url)} ({viewport.label})...",
            total=None
        )
        return await reviewer.review(url=url, viewport=viewport, **options)


def _report_failure(failure: AnalysisFailure, verbose: bool) -> None:
    """Print the stable message for a failed analysis"""
    err_console.print(f"[red]Error: {escape(describe_failure(failure.kind, failure.status_code))}[/red]")
    if verbose:
        err_console.print(
            f"[dim]{escape(failure.message)} "
            f"(kind={failure.kind.value}, attempts={failure.attempts})[/dim]"
        )


if __name__ == "__main__":
    main()
