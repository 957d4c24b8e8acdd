"""
Command-line interface for odtfill.

Usage:
    odtfill --template invoice.odt --json data.json --destfile out.odt
    odtfill --template invoice.odt --xml data.xml --destfile out.odt --pdf
    odtfill --template label.odt --json data.json --destfile label.odt --print "Zebra ZD420"
    odtfill --template invoice.odt --sanitize
    odtfill --template invoice.odt --list-placeholders
"""

import argparse
import logging
import sys
from typing import List, Optional

from .api import extract_placeholders, fill_template, sanitize_template
from .config import FillOptions
from .renderers.pdf_converter import PdfConverter, is_thermal_printer
from .utils.exceptions import ConversionError, OdtFillError, handle_exception
from .utils.rich_logger import RichLogger, get_rich_logger, setup_logging
from .version import __version__

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="odtfill",
        description="odtfill - fill ODT templates with JSON or XML data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  odtfill --template t.odt --json data.json --destfile out.odt
  odtfill --template t.odt --xml data.xml --destfile out.odt --pdf
  odtfill --template t.odt --json data.json --destfile out.odt --print "Zebra ZD420"
  odtfill --template t.odt --sanitize
        """,
    )

    parser.add_argument("--template", help="ODT template path or https:// URL")
    data_group = parser.add_mutually_exclusive_group()
    data_group.add_argument("--json", dest="json_path", help="JSON data path or https:// URL")
    data_group.add_argument("--xml", dest="xml_path", help="XML data path or https:// URL")
    parser.add_argument("--destfile", help="Output ODT file (.odt is appended when missing)")
    parser.add_argument(
        "--novalue",
        help="Text replacing placeholders without a value (default: keep them verbatim)"
    )
    parser.add_argument("--pdf", action="store_true", help="Convert the result to PDF")
    parser.add_argument(
        "--print",
        dest="printer",
        metavar="PRINTER",
        help="Print the PDF on PRINTER (implies --pdf)"
    )
    parser.add_argument("--overwrite", action="store_true", help="Overwrite an existing destination")
    parser.add_argument(
        "--sanitize",
        action="store_true",
        help="Remove spans bound to useless text styles from the template, in place"
    )
    parser.add_argument(
        "--list-placeholders",
        action="store_true",
        help="List the placeholders of the template and exit"
    )
    parser.add_argument(
        "--image-workers",
        type=int,
        default=1,
        help="Threads used to fetch images (default: 1)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for each download (default: 30)"
    )
    parser.add_argument(
        "--paper-size",
        default="4x6",
        help="Thermal printer paper size in inches, WxH (default: 4x6)"
    )
    parser.add_argument(
        "--keep-workdir",
        action="store_true",
        help="Keep the temporary working directory"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--version", action="version", version=f"odtfill {__version__}")

    return parser


def build_options(args: argparse.Namespace) -> FillOptions:
    return FillOptions(
        no_value_replacement=args.novalue,
        http_timeout=args.timeout,
        image_workers=args.image_workers,
        keep_workdir=args.keep_workdir,
        thermal_paper_size=args.paper_size,
    )


def cmd_sanitize(args: argparse.Namespace, reporter: RichLogger) -> int:
    """Handle --sanitize."""
    removed = sanitize_template(args.template, options=build_options(args))
    reporter.success(f"Sanitized ODT file by removing useless styles ({removed} spans)")
    return 0


def cmd_list(args: argparse.Namespace, reporter: RichLogger) -> int:
    """Handle --list-placeholders."""
    placeholders = extract_placeholders(args.template, options=build_options(args))
    reporter.table(
        f"Placeholders in {args.template}",
        {info.name: f"{info.type} x{info.count} ({', '.join(info.parts)})" for info in placeholders},
    )
    return 0


def cmd_fill(args: argparse.Namespace, reporter: RichLogger) -> int:
    """Handle a fill run, with optional PDF conversion and printing."""
    options = build_options(args)
    data_path = args.json_path or args.xml_path
    data_format = "json" if args.json_path else "xml"

    result = fill_template(
        args.template,
        args.destfile,
        data_path=data_path,
        data_format=data_format,
        options=options,
        overwrite=args.overwrite,
    )
    if result.incomplete:
        logger.warning("Data marked incomplete, output renamed")
    reporter.success(f"Saved: {result.output_path}")

    if not (args.pdf or args.printer):
        return 0

    converter = PdfConverter(options)
    try:
        pdf_path = converter.convert_to_pdf(result.output_path)
    except ConversionError as e:
        logger.error(e.message)
        reporter.failure(f"PDF conversion failed, ODT retained: {result.output_path}")
        return 1
    result.output_path.unlink()

    thermal = bool(args.printer) and is_thermal_printer(args.printer)
    if thermal:
        logger.info(f"Thermal printer detected: {args.printer}, optimizing PDF")
        try:
            converter.optimize_pdf(pdf_path)
        except ConversionError as e:
            logger.warning(f"Ghostscript optimization failed: {e.message}")
    reporter.success(f"PDF ready: {pdf_path}")

    if args.printer:
        try:
            converter.print_pdf(pdf_path, args.printer, thermal=thermal)
        except ConversionError as e:
            logger.error(e.message)
            reporter.failure(f"Failed to print to '{args.printer}'")
            return 1
        reporter.success(f"PDF sent to printer '{args.printer}'")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else "ERROR" if args.quiet else "INFO"
    setup_logging(level)
    reporter = get_rich_logger("odtfill", level)

    if not args.template:
        parser.print_usage(sys.stderr)
        reporter.failure("--template is required")
        return 2

    try:
        if args.sanitize:
            return cmd_sanitize(args, reporter)
        if args.list_placeholders:
            return cmd_list(args, reporter)

        if not (args.json_path or args.xml_path) or not args.destfile:
            parser.print_usage(sys.stderr)
            reporter.failure("--template, --json or --xml, and --destfile are required")
            return 2
        if not args.template.lower().endswith(".odt"):
            reporter.failure("--template file must have a .odt extension")
            return 2

        return cmd_fill(args, reporter)
    except OdtFillError as e:
        error_info = handle_exception(e, {"template": args.template})
        logger.debug(error_info["traceback"])
        reporter.failure(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
