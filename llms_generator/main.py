#!/usr/bin/env python3
"""
llms-full generator - build an LLM-ready snapshot of a website.

Crawls a site through its sitemap (and optionally its links and a local
documentation tree), extracts Markdown from every page and writes a single
llms-full text document.

Usage:
    llms-generator --site-url https://example.com --output public/llms.txt

Features:
    - Resolves sitemaps and sitemap indexes
    - Optional recursive link discovery and local file discovery
    - Readability-based extraction with fallback methods
    - Content categorization and size budgets
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .config import load_config
from .crawler.generator import generate
from .models import GenerationStats
from .options import GeneratorOptions, OUTPUT_FORMATS
from .utils.errors import GeneratorError
from .utils.log import (
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_warning,
    print_info,
    print_stats_table,
)


DEFAULT_OUTPUT = os.path.join("public", "llms.txt")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='llms-generator',
        description='Generate an llms-full text snapshot of a website',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --site-url https://example.com
    %(prog)s -u https://docs.example.com -o build/llms.txt --format small
    %(prog)s --config llms.config.json --dry-run --stats
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to a JSON config file (default: llms.config.json or .llmsrc.json if present)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=DEFAULT_OUTPUT,
        help=f'Output file (default: {DEFAULT_OUTPUT})'
    )

    parser.add_argument(
        '--site-url', '-u',
        type=str,
        default=None,
        help='Site base URL (overrides config and LLMS_SITE_URL/SITE_URL)'
    )

    parser.add_argument(
        '--format',
        choices=OUTPUT_FORMATS,
        default=None,
        help='Output format preset (default: full)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--dry-run', '-d',
        action='store_true',
        help='Generate the document but do not write it'
    )

    parser.add_argument(
        '--force', '-f',
        action='store_true',
        help='Overwrite the output file if it exists'
    )

    parser.add_argument(
        '--stats', '-s',
        action='store_true',
        help='Print detailed generation statistics'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> GeneratorOptions:
    """
    Merge config file, environment and command line into options.

    Raises:
        InvalidURLError: If no usable site URL is configured
        ValueError: If the config file is invalid
    """
    config: Dict[str, Any] = load_config(args.config)
    if args.site_url:
        config['site_url'] = args.site_url
    if args.format:
        config['output_format'] = args.format
    return GeneratorOptions.from_dict(config)


def print_banner() -> None:
    """Print the application banner."""
    banner = f"""
╔═══════════════════════════════════════════════════════════════╗
║                  LLMS-FULL GENERATOR v{__version__:<8}                ║
║           Website snapshots for large language models         ║
╚═══════════════════════════════════════════════════════════════╝
    """
    print_status(banner, "bold cyan")


def print_summary(stats: GenerationStats, output: Optional[str]) -> None:
    """
    Print the generation summary.

    Args:
        stats: Statistics of the finished run
        output: Written file, or None for a dry run
    """
    print("\n" + "=" * 60)
    print_success("GENERATION SUMMARY")
    print("=" * 60)
    print(f"  Pages:             {stats.total_pages}")
    print(f"  Successful:        {stats.successful_pages}")
    print(f"  Failed:            {stats.failed_pages}")
    print(f"  Truncated:         {stats.truncated_pages}")
    print(f"  Characters:        {stats.total_content_length:,}")
    print(f"  Duration:          {stats.duration_seconds:.1f} seconds")
    if output:
        print(f"  Output:            {output}")
    print("=" * 60 + "\n")


def write_output(path: str, document: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(document)


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the generator CLI.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    if not args.quiet:
        print_banner()

    try:
        options = build_options(args)
        output = os.path.abspath(args.output)

        if not args.dry_run and os.path.exists(output) and not args.force:
            print_error(f"Output file already exists: {output} (use --force to overwrite)")
            return 1

        if not args.quiet:
            print_info(f"Site: {options.site_url}")
            print_info(f"Sitemap: {options.sitemap_url if options.use_sitemap else 'disabled'}")
            limits = options.effective_limits()
            print_info(
                f"Format: {options.output_format} "
                f"(max {limits['max_pages']} pages, {limits['max_total_chars']:,} chars)"
            )

        document, stats = await generate(options)

        if args.dry_run:
            print_warning(f"Dry run: {len(document):,} characters not written")
        else:
            write_output(output, document)

        if not args.quiet:
            print_summary(stats, None if args.dry_run else output)
        if args.stats:
            print_stats_table(stats.to_dict())

        if not args.dry_run:
            print_success(f"llms-full written to: {output}")

        return 0

    except KeyboardInterrupt:
        print_error("\nGeneration interrupted by user")
        return 1
    except GeneratorError as e:
        print_error(f"Generation failed: {e}")
        return 1
    except (ValueError, OSError) as e:
        print_error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        print_error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
