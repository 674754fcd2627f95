"""Main CLI entry point for the robust-codepoints command-line tool.

Decodes files of unknown encoding, reports the detected encoding and dumps
code points including garbage bytes and read failures.
"""

import argparse
import codecs
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from robust_codepoints import __version__
from robust_codepoints.character.constants import describe_code_point
from robust_codepoints.character.stream import (
    ESCAPE_BASE,
    CodePointStreamProcessor,
    DecodeResult,
)
from robust_codepoints.character.tables import supported_charsets
from robust_codepoints.shared.config import (
    ConfigError,
    DecoderConfig,
    GarbageHandling,
)
from robust_codepoints.shared.logging import get_logger

logger = get_logger(__name__, None, "cli")

ESCAPE_ERROR_HANDLER = "robust_codepoints.escape"

# Escapes written back as the raw byte they stand for
RAW_ESCAPE_MIN = ESCAPE_BASE + 0x80
RAW_ESCAPE_MAX = ESCAPE_BASE + 0xFF


def load_config(args: argparse.Namespace) -> DecoderConfig:
    """Build the decoder configuration from a config file and CLI flags.

    Flags given on the command line win over values from the file.

    Raises:
        ConfigError: If the config file cannot be read or is invalid
    """
    config = DecoderConfig()
    config_path: Optional[Path] = getattr(args, "config", None)
    if config_path is not None:
        try:
            config = DecoderConfig.from_json(config_path.read_text())
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e

    overrides: Dict[str, Any] = {}
    if getattr(args, "charset", None):
        overrides["charset"] = args.charset
    if getattr(args, "garbage", None):
        overrides["garbage_handling"] = GarbageHandling[args.garbage.upper()]
    if getattr(args, "overlong_nul", False):
        overrides["decode_overlong_nul"] = True
    return config.override(**overrides) if overrides else config


def decode_file(path: Path, config: DecoderConfig) -> DecodeResult:
    """Decode a single file with the given configuration."""
    processor = CodePointStreamProcessor(config)
    with path.open("rb") as stream:
        return processor.process(stream)


def format_code_points(result: DecodeResult) -> str:
    """One line per value, terminal condition last."""
    lines = [describe_code_point(code_point) for code_point in result.code_points]
    lines.append(describe_code_point(result.terminal))
    return "\n".join(lines)


def format_results(path: Path, result: DecodeResult, output_format: str) -> str:
    """Render a decode result in the requested output format."""
    if output_format == "json":
        report = {"file": str(path)}
        report.update(result.to_dict())
        return json.dumps(report, indent=2)
    if output_format == "codepoints":
        return format_code_points(result)
    return result.text


def _escape_handler(error: UnicodeEncodeError) -> Tuple[bytes, int]:
    """Write U+DC80..U+DCFF back as raw bytes, anything else as ``\\uXXXX``."""
    encoded = bytearray()
    for char in error.object[error.start:error.end]:
        value = ord(char)
        if RAW_ESCAPE_MIN <= value <= RAW_ESCAPE_MAX:
            encoded.append(value - ESCAPE_BASE)
        else:
            logger.warning(
                "Escape below 0x80 written as backslash escape",
                extra={"code_point": value},
            )
            encoded.extend(f"\\u{value:04x}".encode("ascii"))
    return bytes(encoded), error.end


codecs.register_error(ESCAPE_ERROR_HANDLER, _escape_handler)


def encode_output(output: str) -> bytes:
    """Encode rendered output as UTF-8.

    Escaped garbage bytes 0x80..0xFF are written back verbatim; escapes of
    lower bytes, which only UTF-16 input produces, have no such encoding and
    are written as backslash escapes one by one.
    """
    return output.encode("utf-8", ESCAPE_ERROR_HANDLER)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="robust-codepoints",
        description="Never-fail decoding of UTF-8, UTF-16 and legacy 8-bit text"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a file")
    decode_parser.add_argument("path", type=Path, help="File to decode")
    decode_parser.add_argument(
        "--format", "-f",
        choices=["text", "codepoints", "json"],
        default="text",
        help="Output format (default: text)"
    )
    decode_parser.add_argument(
        "--charset",
        help=f"Decode as 8-bit charset instead of auto-detecting "
             f"({', '.join(supported_charsets())})"
    )
    decode_parser.add_argument(
        "--garbage",
        choices=[member.name.lower() for member in GarbageHandling],
        help="Rendering of undecodable bytes in text output"
    )
    decode_parser.add_argument(
        "--overlong-nul",
        action="store_true",
        help="Render the overlong NUL sequence C0 80 as U+0000"
    )
    decode_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    decode_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )

    # Detect command
    detect_parser = subparsers.add_parser(
        "detect", help="Report the encoding detected for each file"
    )
    detect_parser.add_argument("paths", nargs="+", type=Path, help="Files to inspect")
    detect_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    return parser


def cmd_decode(args: argparse.Namespace) -> int:
    """Handle decode command."""
    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    if not args.path.is_file():
        print(f"File not found: {args.path}", file=sys.stderr)
        return 1

    try:
        result = decode_file(args.path, config)
    except OSError as e:
        print(f"Could not open {args.path}: {e}", file=sys.stderr)
        return 1

    output = format_results(args.path, result, args.format)
    if args.format != "text":
        output += "\n"
    data = encode_output(output)

    if args.output:
        args.output.write_bytes(data)
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.flush()
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()

    for entry in result.diagnostics[:5]:
        logger.info(entry.message, extra={"position": entry.position})

    return 0 if result.clean else 1


def cmd_detect(args: argparse.Namespace) -> int:
    """Handle detect command."""
    processor = CodePointStreamProcessor(DecoderConfig(record_garbage_diagnostics=False))
    reports: List[Dict[str, Any]] = []
    exit_code = 0

    for path in args.paths:
        if not path.is_file():
            reports.append({"file": str(path), "encoding": None, "error": "File not found"})
            exit_code = 1
            continue

        with path.open("rb") as stream:
            decoder = processor.decoder_for(stream)
            first = decoder.read_code_point()
            reports.append({
                "file": str(path),
                "encoding": decoder.encoding.name,
                "byte_order_mark": first == 0xFEFF,
            })

    if args.format == "json":
        print(json.dumps(reports, indent=2))
    else:
        for report in reports:
            if report.get("error"):
                print(f"{report['file']}: {report['error']}")
            else:
                bom = " (BOM)" if report["byte_order_mark"] else ""
                print(f"{report['file']}: {report['encoding']}{bom}")

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "decode":
            return cmd_decode(args)
        if args.command == "detect":
            return cmd_detect(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
