"""
WooCommerce import sheet tools

Command-line versions of the spreadsheet macros used to prepare a product
sheet for import: WordPress image URL replacement, title casing and the
comma to pipe attribute separator.
"""

import argparse
import logging
import sys

import questionary

from .config import WordPressConfig
from .errors import SelectionError, SheetToolsError
from .media_library import CollisionPolicy, MediaLibrary
from .reconciliation import reconcile_column
from .sheet_range import SheetRange, write_report
from .text_tools import pipes_grid, title_case_grid

logger = logging.getLogger(__name__)

HELP_TEXT = """WordPress Image URL Replacer

1. Set WORDPRESS_SITE_URL (or pass --site-url)
2. Add WORDPRESS_USERNAME / WORDPRESS_APP_PASSWORD only if your media
   requires authentication
3. Pick ONE column of image filenames with --range (e.g. B2:B500 or B:B)
4. woo-sheet-tools replace-urls products.xlsx --range B2:B500

The media library is loaded once per run and every lookup is local.
Values and highlights are written back in a single save.

Red = no match found
Yellow = partial match
Empty/URL-only cells are skipped.

Text tools:
  title-case  Title-case every text cell in the range
  pipes       Replace commas with ' |' in every cell of the range
"""


def confirm(args, message) -> bool:
    if args.yes:
        return True
    answer = questionary.confirm(message, default=True).ask()
    return bool(answer)


def load_config(args) -> WordPressConfig:
    config = WordPressConfig.from_env().override(
        site_url=args.site_url,
        username=args.username,
        app_password=args.app_password,
        timeout=args.timeout,
    )
    config.require_site_url()
    return config


def open_range(args, missing_message) -> SheetRange:
    if not args.range:
        raise SelectionError(missing_message)
    return SheetRange(args.workbook, args.range, args.sheet)


def print_summary(summary, index):
    """Print the end-of-run counts for a URL replacement."""
    print("\n" + "=" * 60)
    print("URL REPLACEMENT SUMMARY")
    print("=" * 60)
    print(f"Successfully replaced: {summary.resolved}")
    print(f"Partially matched:     {summary.partial}")
    print(f"Not found:             {summary.unresolved}")
    print(f"Skipped:               {summary.skipped}")
    print(f"\nMedia items indexed: {index.records_seen} ({len(index)} lookup keys)")
    if not index.complete:
        print(
            f"WARNING: media library fetch stopped early (HTTP {index.failed_status}); "
            "unresolved cells may exist in WordPress"
        )
    print("\nRed = no matches found")
    print("Yellow = partial match")
    print("=" * 60)


def run_replace_urls(args) -> int:
    config = load_config(args)
    sheet = open_range(args, "Please select a column containing filenames.")
    values = sheet.read_column()

    if not confirm(
        args,
        f"Fetch the WordPress media library from {config.site_url} "
        f"and process {len(values)} row(s) in {sheet.ref}?",
    ):
        logger.info("Cancelled; workbook left unchanged")
        return 0

    policy = (
        CollisionPolicy.FIRST_WRITE_WINS
        if args.first_write_wins
        else CollisionPolicy.LAST_WRITE_WINS
    )
    index = MediaLibrary(config).build_index(policy=policy)

    logger.info(f"Processing {len(values)} rows locally (no further API calls)...")
    results, summary = reconcile_column(values, index)

    sheet.set_values([[result.value] for result in results])
    sheet.set_backgrounds([[result.highlight] for result in results])
    sheet.save(args.output)

    if args.report:
        write_report(sheet, values, results, args.report)

    print_summary(summary, index)
    return 0


def run_test_connection(args) -> int:
    config = load_config(args)
    result = MediaLibrary(config).test_connection()
    if result.ok:
        print(f"Success! {result.message}")
        return 0
    print("Connection Failed")
    print(result.message)
    return 1


def run_title_case(args) -> int:
    sheet = open_range(args, "Please select cells to convert to title case.")
    sheet.set_values(title_case_grid(sheet.get_values()))
    sheet.save(args.output)
    return 0


def run_pipes(args) -> int:
    sheet = open_range(args, "Please select cells to modify.")
    sheet.set_values(pipes_grid(sheet.get_values()))
    sheet.save(args.output)
    print(
        f"Replaced commas with pipes in {sheet.num_rows * sheet.num_columns} cell(s)."
    )
    return 0


def run_help(args) -> int:
    print(HELP_TEXT)
    return 0


def build_parser():
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    wordpress = argparse.ArgumentParser(add_help=False)
    wordpress.add_argument(
        "--site-url", help="WordPress site URL (default: $WORDPRESS_SITE_URL)"
    )
    wordpress.add_argument(
        "--username", help="WordPress username (default: $WORDPRESS_USERNAME)"
    )
    wordpress.add_argument(
        "--app-password",
        help="WordPress application password (default: $WORDPRESS_APP_PASSWORD or ./wp.api)",
    )
    wordpress.add_argument(
        "--timeout", type=float, help="Per-request timeout in seconds (default: 30)"
    )

    workbook = argparse.ArgumentParser(add_help=False)
    workbook.add_argument("workbook", help="Path to the .xlsx workbook")
    workbook.add_argument(
        "--range", help="Cell range to operate on, e.g. B2:B200, B:B or A1:D40"
    )
    workbook.add_argument("--sheet", help="Worksheet name (default: active sheet)")
    workbook.add_argument(
        "--output", help="Save to this path instead of overwriting the workbook"
    )

    parser = argparse.ArgumentParser(
        prog="woo-sheet-tools",
        description="Prepare WooCommerce import sheets",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    replace = subparsers.add_parser(
        "replace-urls",
        parents=[common, workbook, wordpress],
        help="Replace filenames in one column with WordPress media URLs",
    )
    replace.add_argument(
        "--report", help="Also write a per-row report (.csv or .xlsx)"
    )
    replace.add_argument(
        "--first-write-wins",
        action="store_true",
        help="When two media items share a lookup key, keep the first one fetched",
    )
    replace.add_argument(
        "-y", "--yes", action="store_true", help="Don't ask for confirmation"
    )
    replace.set_defaults(handler=run_replace_urls)

    connection = subparsers.add_parser(
        "test-connection",
        parents=[common, wordpress],
        help="Check that the WordPress media endpoint is reachable",
    )
    connection.set_defaults(handler=run_test_connection)

    title = subparsers.add_parser(
        "title-case", parents=[common, workbook], help="Title-case text cells"
    )
    title.set_defaults(handler=run_title_case)

    pipes = subparsers.add_parser(
        "pipes", parents=[common, workbook], help="Replace commas with pipes"
    )
    pipes.set_defaults(handler=run_pipes)

    help_cmd = subparsers.add_parser(
        "help", parents=[common], help="Show usage notes"
    )
    help_cmd.set_defaults(handler=run_help)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        return args.handler(args)
    except SheetToolsError as e:
        logger.error(str(e))
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
