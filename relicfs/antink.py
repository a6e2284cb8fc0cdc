"""A pass-through file view that reverses dangerous names and ROT13-encodes content."""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

DEFAULT_LOG_FILE = "/mnt/logs/log.txt"
_DANGEROUS_WORDS = ("nafis", "kimcun")
_NAME_LIMIT = 255

_ROT13_TABLE = bytes.maketrans(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
    b"NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm",
)


def rot13(data: bytes) -> bytes:
    """Rotate ASCII letters by 13 places; other bytes are left alone."""
    return bytes(data).translate(_ROT13_TABLE)


def is_dangerous(name: str) -> bool:
    """Tell whether ``name`` mentions one of the flagged words, ignoring case."""
    lowered = name[:_NAME_LIMIT].lower()
    return any(word in lowered for word in _DANGEROUS_WORDS)


def reverse_name(name: str) -> str:
    """Return ``name`` spelled backwards."""
    return name[::-1]


class AntinkFS:
    """File operations over ``source_dir`` with name and content filtering."""

    def __init__(self, source_dir: str | Path, log_file: str | Path = DEFAULT_LOG_FILE) -> None:
        self.source_dir = str(source_dir)
        self.log_file = Path(log_file)

    def _log(self, path: str, action: str) -> None:
        try:
            with open(self.log_file, "a", encoding="utf-8") as fh:
                fh.write(f"[{time.ctime()}] {action} {path}\n")
        except OSError:
            pass

    def full_path(self, path: str) -> str:
        """Map a path inside the view to the path in the source directory."""
        if path == "/":
            return self.source_dir
        return f"{self.source_dir}{path}"

    def getattr(self, path: str) -> os.stat_result:
        return os.lstat(self.full_path(path))

    def readdir(self, path: str) -> list[str]:
        """List a directory, showing dangerous names reversed."""
        entries = [".", ".."]
        with os.scandir(self.full_path(path)) as it:
            for entry in it:
                try:
                    entry.stat(follow_symlinks=False)
                except OSError:
                    continue
                name = entry.name
                entries.append(reverse_name(name) if is_dangerous(name) else name)
        return entries

    def open(self, path: str, flags: int = os.O_RDONLY) -> None:
        fd = os.open(self.full_path(path), flags)
        os.close(fd)
        self._log(path, "OPEN")
        if is_dangerous(path):
            self._log(path, "[WARNING] DANGEROUS FILE ACCESSED!")

    def read(self, path: str, size: int, offset: int) -> bytes:
        """Read ``size`` bytes at ``offset``; content of safe files comes out ROT13-encoded."""
        fd = os.open(self.full_path(path), os.O_RDONLY)
        try:
            data = os.pread(fd, size, offset)
        finally:
            os.close(fd)
        if data and not is_dangerous(path):
            data = rot13(data)
        self._log(path, "READ")
        return data

    def create(self, path: str, mode: int = 0o644) -> None:
        fd = os.open(self.full_path(path), os.O_CREAT | os.O_WRONLY, mode)
        os.close(fd)
        self._log(path, "CREATE")

    def write(self, path: str, data: bytes, offset: int) -> int:
        fd = os.open(self.full_path(path), os.O_WRONLY)
        try:
            written = os.pwrite(fd, bytes(data), offset)
        finally:
            os.close(fd)
        self._log(path, "WRITE")
        return written

    def unlink(self, path: str) -> None:
        os.unlink(self.full_path(path))
        self._log(path, "UNLINK")

    def mkdir(self, path: str, mode: int = 0o755) -> None:
        os.mkdir(self.full_path(path), mode)
        self._log(path, "MKDIR")


def _view_path(name: str) -> str:
    return name if name.startswith("/") else "/" + name


def main(argv: list[str] | None = None) -> int:
    """Command-line access to the filtered view of a directory."""
    parser = argparse.ArgumentParser(prog="antink", description="Browse a directory through the filter.")
    parser.add_argument("--source", default=".", help="directory to present")
    parser.add_argument("--log", default=DEFAULT_LOG_FILE, help="activity log file")
    sub = parser.add_subparsers(dest="command", required=True)
    ls_cmd = sub.add_parser("ls", help="list a directory")
    ls_cmd.add_argument("path", nargs="?", default="/")
    cat_cmd = sub.add_parser("cat", help="print a file through the filter")
    cat_cmd.add_argument("path")
    put_cmd = sub.add_parser("put", help="copy a local file into the view")
    put_cmd.add_argument("path")
    put_cmd.add_argument("source_file")
    rm_cmd = sub.add_parser("rm", help="delete a file")
    rm_cmd.add_argument("path")
    mkdir_cmd = sub.add_parser("mkdir", help="create a directory")
    mkdir_cmd.add_argument("path")
    args = parser.parse_args(argv)

    fs = AntinkFS(args.source, args.log)
    try:
        if args.command == "ls":
            for entry in fs.readdir(_view_path(args.path) if args.path != "/" else "/"):
                print(entry)
        elif args.command == "cat":
            path = _view_path(args.path)
            fs.open(path)
            data = fs.read(path, fs.getattr(path).st_size, 0)
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
        elif args.command == "put":
            path = _view_path(args.path)
            data = Path(args.source_file).read_bytes()
            fs.create(path, 0o644)
            fs.write(path, data, 0)
        elif args.command == "rm":
            fs.unlink(_view_path(args.path))
        elif args.command == "mkdir":
            fs.mkdir(_view_path(args.path), 0o755)
    except OSError as exc:
        print(f"antink: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())