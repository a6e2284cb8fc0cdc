# relicfs

A small collection of filesystem tools built around a handful of storage
tricks: turning hex dumps back into images, splitting files into numbered
1 KiB pieces, showing reversed names and rot13 contents, and a store whose
areas each keep their files in a different form.

Each tool is a Python class whose methods mirror filesystem operations
(`getattr`, `readdir`, `open`, `read`, `write`, …) and report failures by
raising `OSError`, plus a command with subcommands for use from the shell.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## `relicfs.hexed`

Converts hexadecimal text files into binary images.

- `hex_to_bytes(text)` decodes a hex string two characters at a time,
  skipping any pair that contains a line break. A pair that does not start
  with a hex digit raises `ValueError`.
- `convert_folder(input_folder="anomali", output_folder="image",
  log_file="conversion.log", count=7, now=None)` reads `1.txt` …
  `<count>.txt` from the input folder, writes each as
  `<n>_image_<YYYY-mm-dd>_<HH:MM:SS>.png` into the output folder (created if
  missing), appends one line per successful conversion to the log file and
  returns the paths written. Missing inputs are reported on stderr and
  skipped. `now` is a callable returning a `datetime`, for fixing the
  timestamp.

```
relicfs-hexed [--input anomali] [--output image] [--log conversion.log] [--count 7]
```

## `relicfs.baymax`

`RelicStore(relic_dir, log_file)` presents a flat directory whose files are
kept on disk as numbered pieces (`name.000`, `name.001`, … up to 100) of at
most 1024 bytes each.

- `stored_size(name)` – total size of the consecutive pieces of `name`.
- `getattr(path)` – a `FileAttr` (`mode`, `nlink`, `size`, `is_dir`) for
  `/`, for `/Baymax.jpeg` (size measured when the store was made) and for
  files created through this store; otherwise `FileNotFoundError`.
- `readdir("/")` – `.`, `..`, `Baymax.jpeg` and the files created through
  this store object.
- `open(path)`, `create(path)`, `unlink(path)` – `unlink` removes every
  piece of the file.
- `write(path, data, offset)` – writes into the pieces of the most recently
  created file and returns the number of bytes written.
- `read(path, size, offset)` – reassembles bytes from the pieces.

Creates, writes, first reads and deletes are appended to the log file as
`[YYYY-mm-dd HH:MM:SS] ACTION: description`.

```
relicfs-baymax [--root .] ls
relicfs-baymax stat NAME
relicfs-baymax cat NAME [--output FILE]
relicfs-baymax put NAME SOURCE
relicfs-baymax rm NAME
```

The store lives in `<root>/relics` and logs to `<root>/activity.log`.

## `relicfs.antink`

`AntinkFS(source_dir, log_file="/mnt/logs/log.txt")` is a view of a source
directory.

- `readdir(path)` shows names containing `nafis` or `kimcun` (in any case)
  spelled backwards.
- `read(path, size, offset)` returns the contents of every other file
  rot13-encoded; files with a flagged name are returned unchanged.
- `full_path`, `getattr`, `open(path, flags)`, `create(path, mode)`,
  `write(path, data, offset)`, `unlink` and `mkdir(path, mode)` act directly
  on the source directory.

Opens, reads, creates, writes, deletes and new directories are logged as
`[<ctime>] ACTION path`; opening a flagged file adds a warning line. The
helpers `rot13(data)`, `is_dangerous(name)` and `reverse_name(name)` are
available on their own.

```
relicfs-antink [--source .] [--log FILE] ls [PATH]
relicfs-antink cat PATH
relicfs-antink put PATH SOURCE_FILE
relicfs-antink rm PATH
relicfs-antink mkdir PATH
```

## `relicfs.maimai`

`MaimaiFS(chiho_dir, key=None)` serves a root with seven areas, described by
the `Area` enumeration and found with `area_of(path)`:

| Area        | How files are kept                                          |
|-------------|-------------------------------------------------------------|
| `starter`   | stored with a `.mai` suffix                                 |
| `metro`     | each byte of the name shifted up by its position            |
| `dragon`    | contents rot13-encoded                                      |
| `blackrose` | stored as-is                                                |
| `heaven`    | AES-256-CBC with a random 16-byte IV prepended              |
| `youth`     | zlib-compressed behind a 4-byte little-endian length        |
| `7sref`     | read-only view gathering the files of all the other areas  |

The key must hold at least 32 bytes (only the first 32 are used); without a
key, reading or writing in `heaven` raises `OSError` with `EIO`. Listing
`7sref` needs a `7sref` directory under the root.

The class offers `full_path(path, transformed)`, `find_prism_source(path)`,
`getattr`, `readdir`, `open(path, flags)`, `read(path, size, offset)`,
`write(path, data, offset)`, `create(path, mode)` and `unlink`. The
transforms are exposed directly: `rot13_buffer`, `shift_string`,
`unshift_string`, `compress_buffer`, `decompress_buffer(data,
expected_len)`, `encrypt_aes(plaintext, key, iv)` and
`decrypt_aes(ciphertext, key, iv)`; the last two raise `ValueError` on bad
input.

```
relicfs-maimai [--root .] [--key KEY] ls [PATH]
relicfs-maimai cat PATH [--output FILE]
relicfs-maimai put PATH SOURCE_FILE
relicfs-maimai rm PATH
```

The key may also be given in the `MAIMAI_KEY` environment variable.

## Errors

Filesystem operations raise `OSError` with the matching `errno`: `ENOENT`
for a missing file, `EROFS` for a change inside `7sref`, `EIO` when a stored
file cannot be decoded.

## What this package does not do

None of the views can be mounted as a filesystem: there is no mount command
and no kernel integration. The stores are used through their Python classes
or through the subcommands above, which act on the directories directly.