"""Convert hexadecimal text dumps into binary image files."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_LEADING_SPACE = " \t\r\v\f"


def _parse_pair(pair: str) -> int:
    """Parse up to two leading hex digits of ``pair`` into one byte."""
    stripped = pair.lstrip(_LEADING_SPACE)
    digits = ""
    for char in stripped:
        if char not in _HEX_DIGITS:
            break
        digits += char
    if not digits:
        raise ValueError(f"invalid hexadecimal pair: {pair!r}")
    return int(digits, 16)


def hex_to_bytes(text: str) -> bytes:
    """Decode ``text`` two characters at a time, skipping pairs that touch a newline."""
    out = bytearray()
    for start in range(0, len(text), 2):
        pair = text[start:start + 2]
        if "\n" in pair:
            continue
        out.append(_parse_pair(pair))
    return bytes(out)


def convert_folder(
    input_folder: str | Path = "anomali",
    output_folder: str | Path = "image",
    log_file: str | Path = "conversion.log",
    count: int = 7,
    now: Callable[[], datetime] | None = None,
) -> list[Path]:
    """Convert ``1.txt`` .. ``<count>.txt`` into PNG files and log each conversion.

    Missing inputs are reported on stderr and skipped. Returns the written paths.
    """
    clock = now or datetime.now
    input_dir = Path(input_folder)
    output_dir = Path(output_folder)
    output_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

    written: list[Path] = []
    with open(log_file, "a", encoding="utf-8") as log:
        for index in range(1, count + 1):
            filename = f"{index}.txt"
            input_path = input_dir / filename
            try:
                text = input_path.read_bytes().decode("latin-1")
            except OSError as exc:
                print(f"Failed to open input file {input_path}: {exc}", file=sys.stderr)
                continue

            stamp = clock()
            date_str = stamp.strftime("%Y-%m-%d")
            time_str = stamp.strftime("%H:%M:%S")
            output_name = f"{index}_image_{date_str}_{time_str}.png"
            output_path = output_dir / output_name

            data = hex_to_bytes(text)
            try:
                output_path.write_bytes(data)
            except OSError as exc:
                print(f"Failed to create output file {output_path}: {exc}", file=sys.stderr)
                continue

            log.write(
                f"[{date_str}][{time_str}]: Successfully converted hexadecimal text "
                f"{filename} to {output_name}.\n"
            )
            log.flush()
            print(f"Converted: {input_path} → {output_path}")
            written.append(output_path)

    print(f"All conversions finished and recorded in {log_file}.")
    return written


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="hexed", description="Convert hexadecimal text files into images."
    )
    parser.add_argument("--input", default="anomali", help="folder holding N.txt files")
    parser.add_argument("--output", default="image", help="folder for the images")
    parser.add_argument("--log", default="conversion.log", help="conversion log file")
    parser.add_argument("--count", type=int, default=7, help="number of files to convert")
    args = parser.parse_args(argv)

    try:
        convert_folder(args.input, args.output, args.log, args.count)
    except OSError as exc:
        print(f"Failed to open log file: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())