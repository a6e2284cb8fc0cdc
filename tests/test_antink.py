import os
import stat

import pytest

from relicfs.antink import AntinkFS, is_dangerous, main, reverse_name, rot13


@pytest.fixture
def fs(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    return AntinkFS(source, tmp_path / "log.txt")


def test_rot13_known_value():
    assert rot13(b"Hello, World!") == b"Uryyb, Jbeyq!"


@pytest.mark.parametrize("data", [b"", b"abcxyzABCXYZ", b"123 !?", bytes(range(256))])
def test_rot13_is_involution(data):
    assert rot13(rot13(data)) == data


def test_rot13_leaves_non_letters():
    assert rot13(b"0123-_/\n") == b"0123-_/\n"


@pytest.mark.parametrize(
    "name,expected",
    [("nafis.txt", True), ("KimCun", True), ("my_NAFIS_file", True), ("safe.txt", False), ("kim", False)],
)
def test_is_dangerous(name, expected):
    assert is_dangerous(name) is expected


def test_reverse_name():
    assert reverse_name("nafis.txt") == "txt.sifan"
    assert reverse_name(reverse_name("abc.def")) == "abc.def"


def test_full_path(fs):
    assert fs.full_path("/") == fs.source_dir
    assert fs.full_path("/a/b.txt") == fs.source_dir + "/a/b.txt"


def test_readdir_reverses_dangerous(fs):
    src = fs.source_dir
    open(os.path.join(src, "nafis.txt"), "w").close()
    open(os.path.join(src, "plain.txt"), "w").close()
    entries = fs.readdir("/")
    assert entries[:2] == [".", ".."]
    assert sorted(entries[2:]) == sorted([reverse_name("nafis.txt"), "plain.txt"])


def test_readdir_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.readdir("/nope")


def test_read_applies_rot13_to_safe_files(fs):
    with open(os.path.join(fs.source_dir, "note.txt"), "wb") as fh:
        fh.write(b"Secret Message")
    data = fs.read("/note.txt", 100, 0)
    assert rot13(data) == b"Secret Message"
    assert data != b"Secret Message"


def test_read_keeps_dangerous_files_raw(fs):
    with open(os.path.join(fs.source_dir, "kimcun.txt"), "wb") as fh:
        fh.write(b"raw text")
    assert fs.read("/kimcun.txt", 100, 0) == b"raw text"


def test_read_with_offset_and_size(fs):
    with open(os.path.join(fs.source_dir, "nafis.bin"), "wb") as fh:
        fh.write(b"0123456789")
    assert fs.read("/nafis.bin", 3, 4) == b"456"
    assert fs.read("/nafis.bin", 5, 20) == b""


def test_create_write_read_round_trip(fs):
    fs.create("/new.txt", 0o644)
    assert fs.write("/new.txt", b"abcdef", 0) == 6
    assert fs.write("/new.txt", b"XY", 2) == 2
    assert rot13(fs.read("/new.txt", 100, 0)) == b"abXYef"
    assert fs.getattr("/new.txt").st_size == 6


def test_mkdir_and_unlink(fs):
    fs.mkdir("/dir", 0o755)
    assert stat.S_ISDIR(fs.getattr("/dir").st_mode)
    fs.create("/dir/f", 0o644)
    fs.unlink("/dir/f")
    with pytest.raises(FileNotFoundError):
        fs.getattr("/dir/f")


def test_getattr_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.getattr("/missing")


def test_open_missing_raises(fs):
    with pytest.raises(FileNotFoundError):
        fs.open("/missing", os.O_RDONLY)


def test_log_records_actions(fs):
    fs.create("/nafis.txt", 0o644)
    fs.open("/nafis.txt", os.O_RDONLY)
    fs.read("/nafis.txt", 10, 0)
    log = fs.log_file.read_text().splitlines()
    assert log[0].endswith("CREATE /nafis.txt")
    assert log[1].endswith("OPEN /nafis.txt")
    assert log[2].endswith("[WARNING] DANGEROUS FILE ACCESSED! /nafis.txt")
    assert log[3].endswith("READ /nafis.txt")
    assert all(line.startswith("[") for line in log)


def test_safe_open_has_no_warning(fs):
    fs.create("/ok.txt", 0o644)
    fs.open("/ok.txt", os.O_RDONLY)
    assert "WARNING" not in fs.log_file.read_text()


def test_main_put_and_ls(tmp_path, capsys):
    source = tmp_path / "src"
    source.mkdir()
    local = tmp_path / "local.bin"
    local.write_bytes(b"data")
    log = tmp_path / "log.txt"
    assert main(["--source", str(source), "--log", str(log), "put", "nafis.bin", str(local)]) == 0
    assert (source / "nafis.bin").read_bytes() == b"data"
    assert main(["--source", str(source), "--log", str(log), "ls"]) == 0
    out = capsys.readouterr().out.split()
    assert reverse_name("nafis.bin") in out


def test_main_rm_missing_fails(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    assert main(["--source", str(source), "--log", str(tmp_path / "l"), "rm", "ghost"]) == 1