#!/usr/bin/env python3
"""
PDF Reducer - CLI Interface

Reduce the size of PDF files, one file or a whole directory tree at a time.

Usage:
    pdfreducer input.pdf output.pdf /alwaysRewrite
    pdfreducer ./docs ./reduced --skip-existing
    pdfreducer ./docs ./reduced /dontCopyOnError --json-output
"""

import json
import logging
import sys
from datetime import datetime
from typing import List, Optional, Sequence

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from pdfreducer import FitzReducer, OutcomeKind, Policy, aggregate, reduce_path
from pdfreducer.outcomes import FileOutcome
from pdfreducer.utils import format_size, full_path, get_all_messages, paths_equal

console = Console()
logger = logging.getLogger("pdfreducer")

# Windows-style switches accepted in addition to the long options
LEGACY_SWITCHES = {
    "/failifexists": "--fail-if-exists",
    "/alwaysrewrite": "--always-rewrite",
    "/dontcopyonerror": "--dont-copy-on-error",
    "/skipexisting": "--skip-existing",
    "/?": "--help",
    "/help": "--help",
    "-?": "--help",
}

OUTCOME_STYLES = {
    OutcomeKind.REDUCED: "green",
    OutcomeKind.KEPT_ORIGINAL_SIZE_REGRESSION: "yellow",
    OutcomeKind.KEPT_ORIGINAL_RESULT_BIGGER: "yellow",
    OutcomeKind.COPIED_AFTER_ERROR: "red",
    OutcomeKind.SKIPPED_AFTER_ERROR: "red",
    OutcomeKind.SKIPPED_ALREADY_EXISTS: "dim",
}

EPILOG = """\b
Input and output paths must be different.

\b
Example:
    pdfreducer input.pdf output.pdf /alwaysRewrite

\b
    Opens input.pdf and saves it back to output.pdf.
    If output.pdf already exists, it will be replaced without any warning.
    If output.pdf size is bigger than input.pdf, it will be kept.
"""


def translate_switches(args: Sequence[str]) -> List[str]:
    """Map Windows-style switches (case-insensitive) to their long options."""
    return [LEGACY_SWITCHES.get(arg.lower(), arg) for arg in args]


def setup_logging(verbose: bool):
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_outcome(outcome: FileOutcome):
    """Print the one line describing a processed file."""
    console.print(
        outcome.describe(),
        style=OUTCOME_STYLES[outcome.kind],
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.argument("input_path", required=False, type=click.Path())
@click.argument("output_path", required=False, default=".", type=click.Path())
@click.option(
    "--fail-if-exists",
    is_flag=True,
    help="Existing file(s) will not be overwritten and an error will be raised (/failIfExists)",
)
@click.option(
    "--always-rewrite",
    is_flag=True,
    help="Always rewrite output file(s) even if its size is bigger (/alwaysRewrite)",
)
@click.option(
    "--dont-copy-on-error",
    is_flag=True,
    help="Do not copy files that cannot be reduced because an error occurred (/dontCopyOnError)",
)
@click.option(
    "--skip-existing",
    is_flag=True,
    help="Skip existing target files (/skipExisting)",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def cli(
    ctx,
    input_path: Optional[str],
    output_path: str,
    fail_if_exists: bool,
    always_rewrite: bool,
    dont_copy_on_error: bool,
    skip_existing: bool,
    verbose: bool,
    json_output: bool,
):
    """PDF Reducer - Reduce PDF files size.

    INPUT_PATH is a PDF file or a directory; OUTPUT_PATH is a file or a
    directory and defaults to the current directory.
    """
    setup_logging(verbose)

    if not json_output:
        console.print(
            f"[bold blue]PDF Reducer[/bold blue] - Copyright (C) 2021-{datetime.now().year}. "
            "All rights reserved."
        )

    if input_path is None or paths_equal(input_path, output_path):
        click.echo(ctx.get_help())
        return

    source = full_path(input_path)
    target = full_path(output_path)
    policy = Policy(
        fail_if_exists=fail_if_exists,
        always_rewrite=always_rewrite,
        dont_copy_on_error=dont_copy_on_error,
        skip_existing=skip_existing,
    )

    outcomes: List[FileOutcome] = []

    def on_outcome(outcome: FileOutcome):
        outcomes.append(outcome)
        if not json_output:
            print_outcome(outcome)

    if not json_output:
        settings = Table(show_header=False, box=None)
        settings.add_column("Setting", style="cyan")
        settings.add_column("Value", style="green")
        settings.add_row("Input Path", str(source))
        settings.add_row("Output Path", str(target))
        settings.add_row("Fail If Exists", str(policy.fail_if_exists))
        settings.add_row("Always Rewrite", str(policy.always_rewrite))
        settings.add_row("Don't Copy On Error", str(policy.dont_copy_on_error))
        settings.add_row("Skip Existing", str(policy.skip_existing))
        console.print(Panel(settings, title="Reduction Job"))

    try:
        with FitzReducer() as reducer:
            reduce_path(source, target, policy, reducer, on_outcome)
    except Exception as e:
        logger.debug("Run aborted", exc_info=True)
        message = get_all_messages(e)
        if json_output:
            click.echo(json.dumps({
                "policy": policy.to_dict(),
                "files": [o.to_dict() for o in outcomes],
                "error": message,
            }, indent=2))
        else:
            console.print("\n[bold red]Error:[/bold red] ", end="")
            console.print(message, markup=False, highlight=False, soft_wrap=True)
        sys.exit(1)

    totals = aggregate(o.sizes for o in outcomes)

    if json_output:
        click.echo(json.dumps({
            "input_path": str(source),
            "output_path": str(target),
            "policy": policy.to_dict(),
            "files": [o.to_dict() for o in outcomes],
            "totals": totals.to_dict(),
        }, indent=2))
        return

    table = Table(title="Reduction Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Files", str(len(outcomes)))
    table.add_row("Old Bytes", f"{totals.total_before} ({format_size(totals.total_before)})")
    table.add_row("New Bytes", f"{totals.total_after} ({format_size(totals.total_after)})")
    if totals.is_loss:
        table.add_row("Lost Bytes", f"{-totals.saved_bytes} ({format_size(totals.saved_bytes)})")
        table.add_row("Lost Percent", f"{totals.saved_percent:.2f} %")
    else:
        table.add_row("Saved Bytes", f"{totals.saved_bytes} ({format_size(totals.saved_bytes)})")
        table.add_row("Saved Percent", f"{totals.saved_percent:.2f} %")

    console.print()
    console.print(table)


def main():
    """Main entry point."""
    cli(args=translate_switches(sys.argv[1:]), prog_name="pdfreducer")


if __name__ == "__main__":
    main()
