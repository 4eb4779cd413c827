#!/usr/bin/env python3
"""Print code page tables on a StarPRNT printer.

Usage examples (from project root, with venv activated):

  python -m starprnt.codepage_tables
      → prints the default "cp437" table on the printer configured in .env.

  python -m starprnt.codepage_tables cp866 windows1251 -o tables.bin
      → writes the tables for both code pages to a file instead.

  python -m starprnt.codepage_tables 32 -o -
      → writes the table for numeric code page ID 32 to stdout.

The serial connection parameters and device are taken from .env, see
starprnt.config.
"""

from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Sequence

from starprnt.config import Settings, load_settings
from starprnt.encoder import ESC, GS, StarPrntEncoder
from starprnt.exceptions import StarPrntError

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Rotating file logging in the configured log directory."""
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "starprnt.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
    )
    logging.basicConfig(
        handlers=[handler],
        level=settings.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def print_codepage(encoder: StarPrntEncoder, codepage: str) -> None:
    """Add a single code page table to ``encoder``."""
    # Select codepage by numeric ID or symbolic name
    if codepage.isdigit():
        encoder.raw(bytes((ESC, GS, 0x74, int(codepage))))
    else:
        encoder.codepage(codepage)

    # Table header (top row)
    encoder.bold()
    encoder.line("  " + "".join(format(s, "x") for s in range(16)))
    encoder.bold()

    # Table body
    for x in range(16):
        encoder.bold()
        encoder.text(f"{x:x} ")
        encoder.bold()

        # Avoid sending control characters directly
        row = bytes(b if b >= 0x20 else 0x20 for b in range(x * 16, x * 16 + 16))
        encoder.raw(row)
        encoder.newline()


def build_tables(codepages: Sequence[str], encoder: StarPrntEncoder) -> bytes:
    """Encode a header, one table per code page and a final cut."""

    encoder.initialize()

    # Small header
    encoder.align("center").width(2).height(2)
    encoder.line("Code page tables")
    encoder.width().height().align("left")
    encoder.newline()

    for cp in codepages:
        encoder.width(2).height(2)
        encoder.line(cp)
        encoder.width().height()
        print_codepage(encoder, cp)
        encoder.newline().newline()

    encoder.cut("partial")
    return encoder.encode()


def send_to_printer(data: bytes, settings: Settings) -> None:
    """Write ``data`` to the serial printer using the settings from .env."""
    # Import lazily so the encoder can be used without escpos installed
    from escpos.printer import Serial  # type: ignore[import]

    printer = Serial(
        devfile=settings.serial_port,
        baudrate=settings.baudrate,
        bytesize=settings.serial_bytesize,
        parity=settings.serial_parity,
        stopbits=settings.serial_stopbits,
        timeout=settings.serial_timeout,
        dsrdtr=settings.serial_dsrdtr,
    )
    try:
        printer._raw(data)
    finally:
        printer.close()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print code page tables on a StarPRNT printer.")
    parser.add_argument(
        "codepages",
        nargs="*",
        default=["cp437"],
        help='Code page names or numeric printer IDs (default: "cp437").',
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Write the command stream to this file ('-' for stdout) instead of the printer.",
    )
    parser.add_argument(
        "--width",
        type=int,
        help="Paper width in columns (default from STARPRNT_WIDTH).",
    )
    parser.add_argument(
        "--env-file",
        help="Read settings from this file instead of ./.env.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Build the tables and deliver them to a file, stdout or the printer."""
    args = build_arg_parser().parse_args(argv)
    settings = load_settings(args.env_file)
    setup_logging(settings)

    options = settings.encoder_options()
    encoder = StarPrntEncoder(options, width=args.width or options.width)

    try:
        data = build_tables(args.codepages, encoder)
    except StarPrntError as e:
        logger.error("Could not build code page tables: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger.info("Built tables for %s (%d bytes)", ", ".join(args.codepages), len(data))

    if args.output == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    elif args.output:
        Path(args.output).write_bytes(data)
        print(f"Wrote {len(data)} bytes to {args.output}")
    else:
        send_to_printer(data, settings)
        print(f"Sent {len(data)} bytes to {settings.serial_port}")

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
