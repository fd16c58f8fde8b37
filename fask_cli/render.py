"""Console and JSON rendering of scan reports."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.text import Text

from .models import FileError, LineOrigin, Report


def _format_line(
    number: int,
    content: str,
    is_match: bool,
    pattern: str,
    ignore_case: bool,
    origin: Optional[LineOrigin] = None,
) -> Text:
    gutter = f"{number:>4}: "
    if not is_match:
        return Text(gutter + content, style="dim")

    text = Text(gutter, style="green")
    body = Text(content, style="bold")
    body.highlight_words([pattern], style="bold yellow", case_sensitive=not ignore_case)
    text.append_text(body)
    if origin is not None:
        text.append(f"  (added {origin.date.isoformat()} in {origin.short_commit})", style="cyan")
    return text


def render_report(
    report: Report,
    console: Console,
    pattern: str,
    ignore_case: bool = False,
    show_counts: bool = False,
) -> None:
    """Print every file's context blocks, matched lines highlighted.

    Args:
        report: Fully assembled scan report
        console: Target console
        pattern: Marker to highlight inside matched lines
        ignore_case: Highlight case-insensitively
        show_counts: Append the number of matches to each file header
    """
    for i, file_report in enumerate(report.files):
        if i:
            console.print()

        header = Text(file_report.path, style="bold magenta")
        if show_counts:
            header.append(f" ({file_report.match_count} match(es))", style="dim")
        console.print(header, soft_wrap=True)

        for j, block in enumerate(file_report.blocks):
            if j:
                console.print(Text("  --", style="dim"))
            matched = set(block.matches)
            for number, content in block.lines:
                console.print(
                    _format_line(
                        number,
                        content,
                        number in matched,
                        pattern,
                        ignore_case,
                        file_report.origins.get(number),
                    ),
                    soft_wrap=True,
                )


def render_errors(errors: Iterable[FileError], console: Console) -> None:
    """Print per-file errors as warnings."""
    for error in errors:
        console.print(Text(f"warning: could not read {error.path}: {error.message}", style="yellow"), soft_wrap=True)


def _origin_to_dict(origin: LineOrigin) -> Dict[str, str]:
    return {
        "commit": origin.commit,
        "author": origin.author,
        "date": origin.date.isoformat(),
        "summary": origin.summary,
    }


def report_to_dict(report: Report) -> Dict[str, Any]:
    """Convert a report to JSON-serialisable primitives."""
    files = []
    for file_report in report.files:
        matches = []
        for match in file_report.matches:
            entry: Dict[str, Any] = {"line": match.line_number, "content": match.content}
            origin = file_report.origins.get(match.line_number)
            if origin is not None:
                entry["origin"] = _origin_to_dict(origin)
            matches.append(entry)

        blocks = []
        for block in file_report.blocks:
            matched = set(block.matches)
            blocks.append({
                "start": block.start,
                "end": block.end,
                "lines": [
                    {"line": n, "content": content, "match": n in matched}
                    for n, content in block.lines
                ],
            })

        files.append({"path": file_report.path, "matches": matches, "blocks": blocks})

    return {
        "match_count": report.match_count,
        "files": files,
        "errors": [{"path": e.path, "message": e.message} for e in report.errors],
    }
