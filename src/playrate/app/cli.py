"""Command-line interface for playrate."""

import argparse
from typing import Any


def _add_resolve_command(subparsers: Any) -> None:
    """Add the resolve command."""
    parser = subparsers.add_parser(
        "resolve",
        help="Resolve one free-text query to a catalog entity with play counts",
        description="Parse the query, search the catalog, pick the best match and fetch its play count",
    )
    parser.add_argument("text", help="Free-text query, e.g. \"Fantasy by Mariah Carey\"")
    parser.add_argument("--album", action="store_true", help="Resolve an album instead of a track")


def _add_batch_command(subparsers: Any) -> None:
    """Add the batch command."""
    parser = subparsers.add_parser(
        "batch",
        help="Resolve many queries from a file",
        description="Read one query per line (blank lines and lines starting with # are skipped)",
    )
    parser.add_argument("file", help="Path to a text file with one query per line")
    parser.add_argument("--album", action="store_true", help="Resolve albums instead of tracks")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum concurrent resolutions (defaults to resolution.concurrency from config)",
    )


def _add_playcount_command(subparsers: Any) -> None:
    """Add the playcount command."""
    parser = subparsers.add_parser(
        "playcount",
        aliases=["plays"],
        help="Fetch play counts for catalog track URLs",
        description="Look up lifetime play counts for one or more catalog track URLs",
    )
    parser.add_argument("urls", nargs="+", help="Catalog track URLs (https://open.spotify.com/track/<id>)")


class CLI:
    """Command-line interface handler."""

    def __init__(self) -> None:
        """Initialize CLI parser."""
        self.parser = self._create_parser()

    @staticmethod
    def _create_parser() -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured ArgumentParser

        """
        parser = argparse.ArgumentParser(
            prog="python main.py",
            description="playrate - resolve music queries and report lifetime and annual play counts",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    # Resolve a track
    %(prog)s resolve "Fantasy by Mariah Carey"

    # Resolve an album as JSON
    %(prog)s --json resolve "'Get A Grip' by Aerosmith" --album

    # Resolve every line of a file
    %(prog)s batch queries.txt --concurrency 8

    # Play counts for catalog URLs
    %(prog)s playcount https://open.spotify.com/track/6rqhFgbbKwnb9MLmUQDhG6
            """,
        )

        parser.add_argument(
            "--config",
            type=str,
            help="Path to configuration file. If not specified, uses CONFIG_PATH or config.yaml.",
        )
        parser.add_argument("--json", action="store_true", help="Print results as JSON instead of tables")
        parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

        subparsers = parser.add_subparsers(
            dest="command",
            title="Commands",
            description="Available commands",
            help="Use '%(prog)s COMMAND --help' for command-specific help",
        )
        _add_resolve_command(subparsers)
        _add_batch_command(subparsers)
        _add_playcount_command(subparsers)

        return parser

    def parse_args(self, args: list[str] | None = None) -> argparse.Namespace:
        """Parse command-line arguments.

        Args:
            args: List of arguments (use sys.argv if None)

        Returns:
            Parsed arguments namespace

        """
        return self.parser.parse_args(args)

    def print_help(self) -> None:
        """Print help message."""
        self.parser.print_help()
