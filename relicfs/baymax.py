"""A virtual file store that keeps every file as numbered 1 KiB parts."""

from __future__ import annotations

import argparse
import errno
import logging
import os
import stat
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

VIRTUAL_FILENAME = "Baymax.jpeg"
PART_SIZE = 1024
MAX_PARTS = 100
MAX_CREATED = 100


@dataclass(frozen=True)
class FileAttr:
    """Attributes reported for an entry of the store."""

    mode: int
    nlink: int
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)


def _part_name(name: str, index: int) -> str:
    return f"{name}.{index:03d}"


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


class RelicStore:
    """File operations over a directory of split relic parts."""

    def __init__(self, relic_dir: str | Path, log_file: str | Path) -> None:
        self.relic_dir = Path(relic_dir)
        self.log_file = Path(log_file)
        self.latest_created = ""
        self.created: list[str] = []
        self.last_read = ""
        self.total_size = self.stored_size(VIRTUAL_FILENAME)
        logger.debug("total_size calculated = %d bytes", self.total_size)

    def _part_path(self, name: str, index: int) -> Path:
        return self.relic_dir / _part_name(name, index)

    def _log(self, action: str, desc: str) -> None:
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with open(self.log_file, "a", encoding="utf-8") as fh:
                fh.write(f"[{stamp}] {action}: {desc}\n")
        except OSError:
            pass

    def _existing_parts(self, name: str):
        for index in range(MAX_PARTS):
            part = self._part_path(name, index)
            if not part.exists():
                return
            yield index, part

    def stored_size(self, name: str) -> int:
        """Sum the sizes of the consecutive parts stored for ``name``."""
        return sum(part.stat().st_size for _, part in self._existing_parts(name))

    def getattr(self, path: str) -> FileAttr:
        if path == "/":
            return FileAttr(stat.S_IFDIR | 0o755, 2)
        name = path[1:]
        if name == VIRTUAL_FILENAME:
            return FileAttr(stat.S_IFREG | 0o644, 1, self.total_size)
        if name in self.created:
            return FileAttr(stat.S_IFREG | 0o644, 1, self.stored_size(name))
        raise _not_found(path)

    def readdir(self, path: str) -> list[str]:
        if path != "/":
            raise _not_found(path)
        return [".", "..", VIRTUAL_FILENAME, *self.created]

    def open(self, path: str) -> None:
        name = path[1:]
        if name != VIRTUAL_FILENAME and name not in self.created:
            raise _not_found(path)

    def create(self, path: str) -> None:
        name = path[1:]
        logger.debug("create file: %s", name)
        self.latest_created = name
        if len(self.created) < MAX_CREATED:
            self.created.append(name)
        self._log("CREATE", name)

    def write(self, path: str, data: bytes, offset: int) -> int:
        """Write ``data`` at ``offset`` into the parts of the most recently created file."""
        name = self.latest_created
        payload = bytes(data)
        logger.debug("write to file: %s (offset: %d, size: %d)", name, offset, len(payload))

        index, within = divmod(offset, PART_SIZE)
        written = 0
        parts: list[str] = []
        while written < len(payload):
            chunk = payload[written:written + PART_SIZE - within]
            mode = "wb" if within == 0 else "r+b"
            try:
                with open(self._part_path(name, index), mode) as fh:
                    fh.seek(within)
                    fh.write(chunk)
            except OSError as exc:
                raise OSError(errno.EIO, os.strerror(errno.EIO), str(self._part_path(name, index))) from exc
            parts.append(_part_name(name, index))
            written += len(chunk)
            within = 0
            index += 1

        self._log("WRITE", f"{name} -> {', '.join(parts)}")
        return written

    def read(self, path: str, size: int, offset: int) -> bytes:
        name = path[1:]
        logger.debug("read called for %s", name)
        if offset == 0 and name != self.last_read:
            self.last_read = name
            self._log("READ", name)

        out = bytearray()
        remaining = size
        position = 0
        index = 0
        while remaining > 0:
            try:
                blob = self._part_path(name, index).read_bytes()
            except FileNotFoundError:
                break
            index += 1
            if offset >= position + len(blob):
                position += len(blob)
                continue
            start = max(offset - position, 0)
            chunk = blob[start:start + remaining]
            out += chunk
            remaining -= len(chunk)
            position += len(blob)
        return bytes(out)

    def unlink(self, path: str) -> None:
        name = path[1:]
        logger.debug("unlink file: %s", name)
        last_index = -1
        for index, part in list(self._existing_parts(name)):
            part.unlink()
            last_index = index

        if name in self.created:
            self.created.remove(name)

        if last_index >= 0:
            self._log("DELETE", f"{_part_name(name, 0)} - {_part_name(name, last_index)}")


def main(argv: list[str] | None = None) -> int:
    """Command-line access to the relic store in ``<root>/relics``."""
    parser = argparse.ArgumentParser(prog="baymax", description="Work with split relic files.")
    parser.add_argument("--root", default=".", help="directory holding relics/ and activity.log")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("ls", help="list the store")
    stat_cmd = sub.add_parser("stat", help="show the size of a file")
    stat_cmd.add_argument("name")
    cat_cmd = sub.add_parser("cat", help="reassemble a file")
    cat_cmd.add_argument("name")
    cat_cmd.add_argument("--output", help="write here instead of stdout")
    put_cmd = sub.add_parser("put", help="store a file as parts")
    put_cmd.add_argument("name")
    put_cmd.add_argument("source")
    rm_cmd = sub.add_parser("rm", help="delete the parts of a file")
    rm_cmd.add_argument("name")
    args = parser.parse_args(argv)

    root = Path(args.root)
    store = RelicStore(root / "relics", root / "activity.log")
    try:
        if args.command == "ls":
            for entry in store.readdir("/"):
                print(entry)
        elif args.command == "stat":
            if args.name == VIRTUAL_FILENAME:
                size = store.getattr("/" + args.name).size
            else:
                size = store.stored_size(args.name)
            print(size)
        elif args.command == "cat":
            data = store.read("/" + args.name, store.stored_size(args.name), 0)
            if args.output:
                Path(args.output).write_bytes(data)
            else:
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()
        elif args.command == "put":
            data = Path(args.source).read_bytes()
            store.relic_dir.mkdir(parents=True, exist_ok=True)
            store.create("/" + args.name)
            store.write("/" + args.name, data, 0)
        elif args.command == "rm":
            store.unlink("/" + args.name)
    except OSError as exc:
        print(f"baymax: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())