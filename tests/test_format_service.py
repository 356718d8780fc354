import random

import pytest

from iconprobe.models.image_format import ImageFormat
from iconprobe.services.format_service import detect_format, is_png

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"
ICO_MAGIC = b"\x00\x00\x01\x00"
BMP_MAGIC = b"BM"


def _random_suffixes(seed: int, count: int = 50):
    rng = random.Random(seed)
    return [bytes(rng.randrange(256) for _ in range(rng.randrange(0, 64))) for _ in range(count)]


@pytest.mark.parametrize(
    "data, expected",
    [
        (PNG_MAGIC + b"\x00\x00", ImageFormat.PNG),
        (b"\xff\xd8\xff\xe0\x00\x10", ImageFormat.JPEG),
        (b"RIFF\x00\x00\x00\x00WEBP", ImageFormat.WEBP),
        (b"BM\x00\x00\x00\x00", ImageFormat.BMP),
        (b"\x00\x00\x01\x00\x01\x00", ImageFormat.ICO),
        (b"\x12\x34\x56\x78\x9a\xbc", ImageFormat.UNKNOWN),
    ],
)
def test_detects_by_magic_bytes(data, expected):
    assert detect_format(data) is expected


@pytest.mark.parametrize("data", [b"", b"\x89", b"B"])
def test_too_short_is_unknown(data):
    assert detect_format(data) is ImageFormat.UNKNOWN


def test_truncated_signatures_are_not_matched():
    assert detect_format(PNG_MAGIC[:7]) is ImageFormat.UNKNOWN
    assert detect_format(b"\xff\xd8") is ImageFormat.UNKNOWN
    assert detect_format(b"\x00\x00\x01") is ImageFormat.UNKNOWN
    # RIFF без WEBP по смещению 8
    assert detect_format(b"RIFF\x00\x00\x00\x00WAVE") is ImageFormat.UNKNOWN
    assert detect_format(b"RIFF\x00\x00\x00\x00WEB") is ImageFormat.UNKNOWN


def test_cursor_header_is_not_ico():
    assert detect_format(b"\x00\x00\x02\x00\x01\x00") is ImageFormat.UNKNOWN


@pytest.mark.parametrize(
    "magic, expected",
    [
        (PNG_MAGIC, ImageFormat.PNG),
        (JPEG_MAGIC, ImageFormat.JPEG),
        (ICO_MAGIC, ImageFormat.ICO),
        (BMP_MAGIC, ImageFormat.BMP),
    ],
)
def test_prefix_wins_regardless_of_trailing_bytes(magic, expected):
    for suffix in _random_suffixes(seed=len(magic)):
        assert detect_format(magic + suffix) is expected


def test_webp_with_any_riff_size():
    rng = random.Random(7)
    for suffix in _random_suffixes(seed=12):
        size = rng.getrandbits(32).to_bytes(4, "little")
        assert detect_format(b"RIFF" + size + b"WEBP" + suffix) is ImageFormat.WEBP


def test_detection_is_deterministic():
    for data in _random_suffixes(seed=99, count=200):
        assert detect_format(data) is detect_format(data)


def test_accepts_bytearray_and_memoryview():
    data = PNG_MAGIC + b"\x00"
    assert detect_format(bytearray(data)) is ImageFormat.PNG
    assert detect_format(memoryview(data)) is ImageFormat.PNG


def test_is_png():
    assert is_png(PNG_MAGIC + b"rest")
    assert not is_png(b"\x28\x00\x00\x00")


@pytest.mark.parametrize(
    "image_format, name",
    [
        (ImageFormat.UNKNOWN, "Unknown"),
        (ImageFormat.PNG, "PNG"),
        (ImageFormat.JPEG, "JPEG"),
        (ImageFormat.WEBP, "WebP"),
        (ImageFormat.BMP, "BMP"),
        (ImageFormat.ICO, "ICO"),
    ],
)
def test_format_names(image_format, name):
    assert str(image_format) == name
