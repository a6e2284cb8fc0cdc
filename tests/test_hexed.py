from datetime import datetime

import pytest

from relicfs.hexed import convert_folder, hex_to_bytes, main

FIXED = datetime(2024, 1, 2, 3, 4, 5)


def _clock():
    return FIXED


def test_png_signature_decodes():
    assert hex_to_bytes("89504e470d0a1a0a") == b"\x89PNG\r\n\x1a\n"


def test_uppercase_and_lowercase_agree():
    assert hex_to_bytes("ABCDEF") == hex_to_bytes("abcdef")


@pytest.mark.parametrize("data", [b"", b"\x00", b"hello world", bytes(range(256))])
def test_round_trip(data):
    assert hex_to_bytes(data.hex()) == data


def test_trailing_newline_ignored():
    data = b"\x01\x02\xff"
    assert hex_to_bytes(data.hex() + "\n") == data


def test_invalid_pair_raises():
    with pytest.raises(ValueError):
        hex_to_bytes("zz")


def test_convert_folder_writes_images_and_log(tmp_path):
    source = tmp_path / "in"
    source.mkdir()
    payload = b"\x89PNG\r\n\x1a\nbody"
    (source / "1.txt").write_text(payload.hex() + "\n")
    (source / "3.txt").write_text(b"xyz".hex())
    log = tmp_path / "conv.log"

    written = convert_folder(source, tmp_path / "out", log, 3, _clock)

    assert [p.name for p in written] == [
        "1_image_2024-01-02_03:04:05.png",
        "3_image_2024-01-02_03:04:05.png",
    ]
    assert written[0].read_bytes() == payload
    assert written[1].read_bytes() == b"xyz"
    lines = log.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0] == (
        "[2024-01-02][03:04:05]: Successfully converted hexadecimal text "
        "1.txt to 1_image_2024-01-02_03:04:05.png."
    )


def test_convert_folder_appends_to_log(tmp_path):
    source = tmp_path / "in"
    source.mkdir()
    (source / "1.txt").write_text("00")
    log = tmp_path / "conv.log"
    log.write_text("earlier\n")

    convert_folder(source, tmp_path / "out", log, 1, _clock)

    lines = log.read_text().splitlines()
    assert lines[0] == "earlier"
    assert len(lines) == 2


def test_missing_inputs_produce_nothing(tmp_path):
    written = convert_folder(tmp_path / "absent", tmp_path / "out", tmp_path / "l.log", 7, _clock)
    assert written == []
    assert (tmp_path / "out").is_dir()


def test_main_uses_default_folders(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "anomali").mkdir()
    (tmp_path / "anomali" / "2.txt").write_text(b"image".hex())

    assert main([]) == 0

    images = list((tmp_path / "image").iterdir())
    assert len(images) == 1
    assert images[0].read_bytes() == b"image"
    assert images[0].name.startswith("2_image_")
    assert "2.txt" in (tmp_path / "conversion.log").read_text()