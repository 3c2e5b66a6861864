"""Command-line interface: print and override XMP packets."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from lxml import etree

from .adapters.engines import UpdatePolicy
from .errors import XmpError
from .facade import read_from_file, write_to_file
from .packet import parse_xml
from .session import EngineSession
from .shared import ErrorCode, Result, get_logger, get_version, sanitize_error_message

logger = get_logger(__name__)


def print_metadata(
    path: str,
    output: Optional[str] = None,
    raw: bool = False,
    *,
    session: Optional[EngineSession] = None,
) -> Result[str]:
    key = "xmp_data_orig" if raw else "xmp_data"
    label = " (raw)" if raw else ""
    try:
        metadata = read_from_file(path, session=session)
    except (XmpError, OSError) as exc:
        return Result.from_exception(exc, "Error")

    content = metadata.get(key)
    if not content:
        message = f"No XMP metadata found (key: {key}) for: {path}"
        if output:
            return Result.Err(ErrorCode.INVALID_INPUT, message)
        return Result.Ok(message)

    if output:
        try:
            Path(output).write_text(content, encoding="utf-8")
        except OSError as exc:
            return Result.Err(ErrorCode.WRITE_FAILED, sanitize_error_message(exc, f"Error writing to output file {output}"))
        return Result.Ok(f"XMP Metadata from {path}{label} written to {output}")
    return Result.Ok(f"XMP Metadata for: {path}{label}\n{content}")


def override_metadata(
    path: str,
    xml_path: str,
    *,
    session: Optional[EngineSession] = None,
) -> Result[str]:
    xml_file = Path(xml_path)
    if not xml_file.exists():
        return Result.Err(ErrorCode.FILE_NOT_FOUND, f"XML file not found: {xml_path}")
    if not os.access(xml_file, os.R_OK):
        return Result.Err(ErrorCode.FILE_NOT_FOUND, f"XML file is not readable: {xml_path}")

    xml_content = xml_file.read_text(encoding="utf-8")
    try:
        parse_xml(xml_content)
    except etree.XMLSyntaxError as exc:
        return Result.Err(ErrorCode.INVALID_XML, sanitize_error_message(exc, f"Invalid XML in {xml_path}"))

    try:
        write_to_file(path, xml_content, policy=UpdatePolicy.OVERRIDE, session=session)
    except (XmpError, OSError) as exc:
        return Result.from_exception(exc, "Error")
    return Result.Ok(f"Successfully overrode XMP metadata in {path} with content from {xml_path}.")


def show_version() -> Result[str]:
    return Result.Ok(f"xmpkit version {get_version()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xmpkit", description="Read and write XMP metadata embedded in files.")
    commands = parser.add_subparsers(dest="command", required=True)

    show = commands.add_parser("print-metadata", help="Print the XMP packet of a file.")
    show.add_argument("path", help="File to read")
    show.add_argument("output", nargs="?", default=None, help="Write the packet here instead of stdout")
    show.add_argument("--raw", action="store_true", help="Output the raw packet instead of the canonical XML")

    override = commands.add_parser("override-metadata", help="Replace the XMP packet of a file.")
    override.add_argument("path", help="File to update")
    override.add_argument("xml_path", help="XML file holding the new packet")

    commands.add_parser("version", help="Show the xmpkit version.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "print-metadata":
            result = print_metadata(args.path, args.output, args.raw)
        elif args.command == "override-metadata":
            result = override_metadata(args.path, args.xml_path)
        else:
            result = show_version()
    except Exception as exc:
        logger.debug("Unexpected failure in %s", args.command, exc_info=True)
        result = Result.from_exception(exc, "An unexpected error occurred")

    if result.ok:
        print(result.data)
    else:
        print(f"Error: {result.error}", file=sys.stderr)
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
