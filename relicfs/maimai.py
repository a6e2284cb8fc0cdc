"""A layered file view whose areas each store their files in a different way."""

from __future__ import annotations

import argparse
import errno
import os
import struct
import sys
import zlib
from enum import Enum
from pathlib import Path

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AES_KEY_LEN = 32
AES_BLOCK_SIZE = 16
_SIZE_HEADER = struct.Struct("<I")

_ROT13_TABLE = bytes.maketrans(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
    b"NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm",
)


class Area(Enum):
    """Top-level areas of the view."""

    STARTER = "starter"
    METRO = "metro"
    DRAGON = "dragon"
    BLACKROSE = "blackrose"
    HEAVEN = "heaven"
    YOUTH = "youth"
    PRISM = "7sref"

    @property
    def prefix(self) -> str:
        return "/" + self.value


# Areas that the prism area draws from, in lookup order.
_CHIHO_ORDER = (
    Area.STARTER,
    Area.METRO,
    Area.DRAGON,
    Area.BLACKROSE,
    Area.HEAVEN,
    Area.YOUTH,
)
_TRANSFORMED = frozenset({Area.STARTER, Area.METRO, Area.DRAGON, Area.HEAVEN, Area.YOUTH})
_ROOT_ENTRIES = ("starter", "metro", "dragon", "blackrose", "heaven", "youth", "7sref")


def area_of(path: str) -> Area | None:
    """Return the area ``path`` lies in, or None for the root and unknown paths."""
    for area in Area:
        if path == area.prefix or path.startswith(area.prefix + "/"):
            return area
    return None


def rot13_buffer(data: bytes) -> bytes:
    """Rotate ASCII letters by 13 places."""
    return bytes(data).translate(_ROT13_TABLE)


def shift_string(name: str) -> str:
    """Add each byte's position to it, wrapping at 256."""
    raw = os.fsencode(name)
    return os.fsdecode(bytes((byte + pos) % 256 for pos, byte in enumerate(raw)))


def unshift_string(name: str) -> str:
    """Undo :func:`shift_string`."""
    raw = os.fsencode(name)
    return os.fsdecode(bytes((byte - pos) % 256 for pos, byte in enumerate(raw)))


def compress_buffer(data: bytes) -> bytes:
    """Compress with zlib at the best compression level."""
    return zlib.compress(bytes(data), zlib.Z_BEST_COMPRESSION)


def decompress_buffer(data: bytes, expected_len: int) -> bytes:
    """Decompress a complete zlib stream that must fit in ``expected_len`` bytes."""
    inflater = zlib.decompressobj()
    try:
        if expected_len > 0:
            out = inflater.decompress(bytes(data), expected_len)
        else:
            out = inflater.decompress(bytes(data))
    except zlib.error as exc:
        raise ValueError(f"corrupt compressed data: {exc}") from exc
    if inflater.unconsumed_tail or len(out) > expected_len:
        raise ValueError("decompressed data exceeds the expected length")
    if not inflater.eof:
        raise ValueError("incomplete compressed data")
    return out


def _check_aes(key: bytes, iv: bytes) -> None:
    if len(key) != AES_KEY_LEN:
        raise ValueError(f"AES-256 key must be {AES_KEY_LEN} bytes")
    if len(iv) != AES_BLOCK_SIZE:
        raise ValueError(f"IV must be {AES_BLOCK_SIZE} bytes")


def encrypt_aes(plaintext: bytes, key: bytes, iv: bytes) -> bytes:
    """Encrypt with AES-256-CBC and PKCS#7 padding."""
    _check_aes(key, iv)
    padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
    padded = padder.update(bytes(plaintext)) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def decrypt_aes(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    """Decrypt AES-256-CBC data and strip PKCS#7 padding; raises ValueError on bad input."""
    _check_aes(key, iv)
    if not ciphertext or len(ciphertext) % AES_BLOCK_SIZE:
        raise ValueError("ciphertext length is not a positive multiple of the block size")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
    unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


def _os_error(code: int, path: str) -> OSError:
    return OSError(code, os.strerror(code), path)


def _normalise_key(key: bytes | str | None) -> bytes | None:
    if key is None:
        return None
    raw = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    if len(raw) < AES_KEY_LEN:
        raise ValueError(f"key must hold at least {AES_KEY_LEN} bytes")
    return raw[:AES_KEY_LEN]


class MaimaiFS:
    """File operations over a directory holding one subdirectory per area."""

    def __init__(self, chiho_dir: str | Path, key: bytes | str | None = None) -> None:
        self.chiho_dir = str(chiho_dir)
        self.key = _normalise_key(key)

    def full_path(self, path: str, transformed: bool = False) -> str:
        """Map a view path to the stored path, applying the area's name scheme if asked."""
        area = area_of(path)
        if transformed and area is Area.STARTER:
            return f"{self.chiho_dir}{path}.mai"
        if transformed and area is Area.METRO:
            cut = path.rfind("/")
            return f"{self.chiho_dir}{path[:cut + 1]}{shift_string(path[cut + 1:])}"
        return f"{self.chiho_dir}{path}"

    def _prism_origin(self, path: str) -> tuple[Area, str, str] | None:
        filename = path[len(Area.PRISM.prefix) + 1:]
        for area in _CHIHO_ORDER:
            base = f"{self.chiho_dir}{area.prefix}/"
            if area is Area.STARTER:
                candidate = f"{base}{filename}.mai"
            elif area is Area.METRO:
                candidate = f"{base}{shift_string(filename)}"
            else:
                candidate = f"{base}{filename}"
            if os.path.lexists(candidate):
                return area, filename, candidate
        return None

    def find_prism_source(self, path: str) -> str | None:
        """Return the stored file a prism path refers to, or None."""
        origin = self._prism_origin(path)
        return origin[2] if origin else None

    def getattr(self, path: str) -> os.stat_result:
        area = area_of(path)
        if area is Area.PRISM:
            source = self.find_prism_source(path)
            if source is None:
                raise _os_error(errno.ENOENT, path)
            return os.lstat(source)
        try:
            return os.lstat(self.full_path(path, False))
        except OSError:
            if area in (Area.STARTER, Area.METRO):
                return os.lstat(self.full_path(path, True))
            raise

    def readdir(self, path: str) -> list[str]:
        entries = [".", ".."]
        if path == "/":
            return entries + list(_ROOT_ENTRIES)

        area = area_of(path)
        names = [n for n in os.listdir(self.full_path(path, False)) if n not in (".", "..")]
        if area is Area.PRISM:
            return entries + self._prism_listing()
        if area is Area.STARTER:
            return entries + [n[:-4] for n in names if len(n) > 4 and n.endswith(".mai")]
        if area is Area.METRO:
            return entries + [unshift_string(n) for n in names]
        return entries + names

    def _prism_listing(self) -> list[str]:
        seen: dict[str, None] = {}
        for area in _CHIHO_ORDER:
            try:
                names = os.listdir(f"{self.chiho_dir}{area.prefix}/")
            except OSError:
                continue
            for name in names:
                if name in (".", ".."):
                    continue
                if area is Area.STARTER:
                    if not (len(name) > 4 and name.endswith(".mai")):
                        continue
                    name = name[:-4]
                elif area is Area.METRO:
                    name = unshift_string(name)
                seen.setdefault(name)
        return list(seen)

    def open(self, path: str, flags: int = os.O_RDONLY) -> None:
        fd = os.open(self.full_path(path, area_of(path) in _TRANSFORMED), flags)
        os.close(fd)

    def _require_key(self, path: str) -> bytes:
        if self.key is None:
            raise _os_error(errno.EIO, path)
        return self.key

    def read(self, path: str, size: int, offset: int) -> bytes:
        """Read stored bytes at ``offset`` and decode them as the area requires."""
        area = area_of(path)
        if area is Area.PRISM:
            origin = self._prism_origin(path)
            if origin is None:
                raise _os_error(errno.ENOENT, path)
            source_area, filename, _ = origin
            return self.read(f"{source_area.prefix}/{filename}", size, offset)

        fd = os.open(self.full_path(path, area in _TRANSFORMED), os.O_RDONLY)
        try:
            data = os.pread(fd, size, offset)
        finally:
            os.close(fd)

        if area is Area.DRAGON:
            return rot13_buffer(data)
        if area is Area.HEAVEN:
            if len(data) <= AES_BLOCK_SIZE:
                return b""
            key = self._require_key(path)
            try:
                return decrypt_aes(data[AES_BLOCK_SIZE:], key, data[:AES_BLOCK_SIZE])
            except ValueError as exc:
                raise _os_error(errno.EIO, path) from exc
        if area is Area.YOUTH:
            if len(data) <= _SIZE_HEADER.size:
                return b""
            (original_size,) = _SIZE_HEADER.unpack_from(data)
            try:
                return decompress_buffer(data[_SIZE_HEADER.size:], original_size)
            except ValueError as exc:
                raise _os_error(errno.EIO, path) from exc
        return data

    def write(self, path: str, data: bytes, offset: int) -> int:
        """Encode ``data`` for the area and store it at ``offset``; returns bytes stored."""
        area = area_of(path)
        if area is Area.PRISM:
            raise _os_error(errno.EROFS, path)
        payload = bytes(data)
        if area is Area.HEAVEN:
            key = self._require_key(path)
        fd = os.open(self.full_path(path, area in _TRANSFORMED), os.O_WRONLY | os.O_CREAT, 0o644)
        try:
            if area is Area.DRAGON:
                return os.pwrite(fd, rot13_buffer(payload), offset)
            if area is Area.HEAVEN:
                iv = os.urandom(AES_BLOCK_SIZE)
                return os.pwrite(fd, iv + encrypt_aes(payload, key, iv), offset)
            if area is Area.YOUTH:
                compressed = compress_buffer(payload)
                header = _SIZE_HEADER.pack(len(payload) & 0xFFFFFFFF)
                if os.pwrite(fd, header, offset) != len(header):
                    raise _os_error(errno.EIO, path)
                return os.pwrite(fd, compressed, offset + len(header)) + len(header)
            return os.pwrite(fd, payload, offset)
        finally:
            os.close(fd)

    def create(self, path: str, mode: int = 0o644) -> None:
        area = area_of(path)
        if area is Area.PRISM:
            raise _os_error(errno.EROFS, path)
        real = self.full_path(path, area in _TRANSFORMED)
        fd = os.open(real, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
        os.close(fd)

    def unlink(self, path: str) -> None:
        area = area_of(path)
        if area is Area.PRISM:
            raise _os_error(errno.EROFS, path)
        os.unlink(self.full_path(path, area in _TRANSFORMED))


def _view_path(name: str) -> str:
    return name if name.startswith("/") else "/" + name


def main(argv: list[str] | None = None) -> int:
    """Command-line access to the area view of a directory."""
    parser = argparse.ArgumentParser(prog="maimai", description="Work with the area view.")
    parser.add_argument("--root", default=".", help="directory holding the area folders")
    parser.add_argument("--key", help="AES key of at least 32 bytes (or MAIMAI_KEY)")
    sub = parser.add_subparsers(dest="command", required=True)
    ls_cmd = sub.add_parser("ls", help="list a directory")
    ls_cmd.add_argument("path", nargs="?", default="/")
    cat_cmd = sub.add_parser("cat", help="print a decoded file")
    cat_cmd.add_argument("path")
    cat_cmd.add_argument("--output", help="write here instead of stdout")
    put_cmd = sub.add_parser("put", help="store a local file")
    put_cmd.add_argument("path")
    put_cmd.add_argument("source_file")
    rm_cmd = sub.add_parser("rm", help="delete a file")
    rm_cmd.add_argument("path")
    args = parser.parse_args(argv)

    key = args.key if args.key is not None else os.environ.get("MAIMAI_KEY")
    try:
        fs = MaimaiFS(args.root, key)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        if args.command == "ls":
            for entry in fs.readdir(_view_path(args.path)):
                print(entry)
        elif args.command == "cat":
            path = _view_path(args.path)
            fs.open(path)
            data = fs.read(path, fs.getattr(path).st_size, 0)
            if args.output:
                Path(args.output).write_bytes(data)
            else:
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()
        elif args.command == "put":
            path = _view_path(args.path)
            data = Path(args.source_file).read_bytes()
            fs.create(path, 0o644)
            fs.write(path, data, 0)
        elif args.command == "rm":
            fs.unlink(_view_path(args.path))
    except OSError as exc:
        print(f"maimai: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())