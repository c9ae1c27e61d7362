"""
Reporter - Human-readable summaries of generation and verification runs.
"""

import sys
from typing import Optional, TextIO

from .generation_stats import GenerationStats
from .manifest import Manifest

WIDTH = 70


def format_bytes(size: Optional[float]) -> str:
    """Render a byte count as '12.3 KB'."""
    if size is None:
        return "unknown"
    for unit in ('B', 'KB', 'MB', 'GB', 'TB'):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


def format_duration(seconds: float) -> str:
    if seconds >= 3600:
        return f"{seconds / 3600:.1f} hours"
    if seconds >= 60:
        return f"{seconds / 60:.1f} minutes"
    return f"{seconds:.1f} seconds"


class Reporter:
    """
    Writes run reports to a text stream.
    """

    def __init__(self, output: Optional[TextIO] = None):
        """
        Args:
            output: Stream to write to (default: stdout)
        """
        self.output = output or sys.stdout

    def _line(self, text: str = "") -> None:
        print(text, file=self.output)

    def _banner(self, title: str) -> None:
        self._line("=" * WIDTH)
        self._line(title)
        self._line("=" * WIDTH)
        self._line()

    def _listing(self, heading: str, items) -> None:
        """A heading followed by one indented line per item between rules."""
        self._line(heading)
        self._line("-" * WIDTH)
        for item in items:
            self._line(f"  {item}")
        self._line("-" * WIDTH)

    def report_run(self, stats: GenerationStats, manifest: Optional[Manifest] = None) -> None:
        """Summarize a generation run, ending with the one-line summary."""
        self._banner("IMAGE DERIVATIVE GENERATION SUMMARY")

        self._line("Sources:")
        self._line(f"  Discovered:           {stats.discovered:,}")
        self._line(f"  Derivatives Written:  {stats.processed:,}")
        self._line(f"  Placeholders:         {stats.placeholders:,}")
        self._line(f"  Failed:               {stats.errors:,}")
        self._line()

        self._line("Output:")
        self._line(f"  Files Written:        {stats.files_written:,}")
        self._line(f"  Total Size:           {format_bytes(stats.bytes_written)}")
        self._line(f"  Time:                 {format_duration(stats.elapsed_seconds)}")
        if manifest is not None:
            self._line(f"  Manifest Entries:     {manifest.total_entries:,}")
        if stats.manifest_path:
            self._line(f"  Manifest:             {stats.manifest_path}")
        self._line()

        if stats.collisions:
            self._line(f"⚠️  WARNING: {stats.collisions} manifest key collision(s)")
            for base in (manifest.collisions if manifest is not None else []):
                self._line(f"   {base}")
            self._line("   Later sources replaced earlier entries with the same base path.")
            self._line()

        if stats.error_details:
            self._listing("Failures:", stats.error_details)
            self._line()

        self._line(stats.summary_line())

    def report_verification(self, stats: GenerationStats) -> None:
        self._banner("DERIVATIVE VERIFICATION")
        self._line(f"  Checked:   {stats.verified:,}")
        self._line(f"  Missing:   {len(stats.missing):,}")
        self._line()

        if stats.missing:
            self._listing("Sources without derivatives:", stats.missing)
        else:
            self._line("✓  All sources have derivatives")

    def report_manifest(self, manifest: Manifest) -> None:
        """List every manifest entry with its derivative widths."""
        self._listing(
            "MANIFEST ENTRIES",
            (manifest.entries[base].format_status() for base in sorted(manifest.entries)),
        )
        self._line(
            f"  {manifest.total_entries:,} entries, "
            f"{manifest.total_placeholders:,} placeholders, "
            f"{manifest.total_derivatives:,} responsive derivatives"
        )
