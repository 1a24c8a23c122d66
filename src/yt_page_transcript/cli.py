"""
cli.py — Command-line interface for yt-page-transcript.

Provides the `yt-page-transcript` command group (registered as a console
script in pyproject.toml):

    get       Fetch a video's metadata and transcript from its watch page.

Usage examples:
    yt-page-transcript get "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    yt-page-transcript get https://youtu.be/dQw4w9WgXcQ --format json
    yt-page-transcript get https://youtu.be/dQw4w9WgXcQ --lang de,en --prefer-auto
    yt-page-transcript get https://youtu.be/dQw4w9WgXcQ --notes-dir ~/YouTube
"""

from __future__ import annotations

import json
import logging
import os
import sys

import click

from yt_page_transcript.config import ExtractorConfig, parse_languages
from yt_page_transcript.errors import TranscriptError
from yt_page_transcript.extractor import (
    FORMATS,
    format_doc,
    format_json,
    format_note,
    format_text,
    note_path,
)
from yt_page_transcript.service import TranscriptService


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _write_file(path: str, text: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)
        fh.write("\n")
    click.echo(f"Transcript written to {path}", err=True)


# ---------------------------------------------------------------------------
# CLI group: the top-level `yt-page-transcript` command
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline progress to stderr.")
def main(verbose: bool) -> None:
    """
    YouTube page transcript extractor — metadata and captions from a watch page.
    """
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Subcommand: get: fetch a transcript from YouTube
# ---------------------------------------------------------------------------

@main.command()
@click.argument("url")
@click.option(
    "--format", "-f",
    "fmt",
    type=click.Choice(FORMATS, case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format: plain text, JSON, timestamped markdown, or a markdown note with frontmatter.",
)
@click.option(
    "--lang", "-l",
    default=None,
    help="Comma-separated caption language codes in priority order (e.g. 'de,en'). Defaults to English.",
)
@click.option(
    "--prefer-auto",
    is_flag=True,
    help="Prefer auto-generated captions over creator-uploaded ones.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Per-request HTTP timeout in seconds.",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write output to a file instead of stdout.",
)
@click.option(
    "--notes-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Save a markdown note to NOTES_DIR/<channel handle>/<title>.md.",
)
def get(
    url: str,
    fmt: str,
    lang: str | None,
    prefer_auto: bool,
    timeout: float | None,
    output: str | None,
    notes_dir: str | None,
) -> None:
    """
    Fetch a YouTube video's metadata and transcript.

    URL can be a youtube.com/watch, youtu.be or youtube.com/shorts link.
    A video without captions is not an error: the transcript is empty.
    """
    try:
        base = ExtractorConfig.from_env()
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    config = ExtractorConfig(
        languages=parse_languages(lang) or base.languages,
        prefer_manual=base.prefer_manual and not prefer_auto,
        timeout=timeout if timeout is not None else base.timeout,
    )

    try:
        response = TranscriptService(config).fetch_transcript(url)
    except TranscriptError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)

    if not response.lines:
        click.echo(f"No transcript available for {response.video_id}", err=True)

    fmt = fmt.lower()
    if fmt == "json":
        text = json.dumps(format_json(response), indent=2, ensure_ascii=False)
    elif fmt == "doc":
        text = format_doc(response)
    elif fmt == "note":
        text = format_note(response, video_url=url)
    else:
        text = format_text(response)

    if notes_dir:
        path = os.path.join(os.path.expanduser(notes_dir), note_path(response))
        _write_file(path, format_note(response, video_url=url))

    if output:
        _write_file(output, text)
    elif not notes_dir:
        click.echo(text)
