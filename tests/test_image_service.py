import io

import pytest
from PIL import Image, features

from builders import dib_bytes, ico_bytes, png_bytes
from iconprobe.config import DecoderSettings
from iconprobe.errors import EmbeddedDecodeFailed, IconDecodeError, UnsupportedDibHeader, UnsupportedFormat
from iconprobe.models.image_format import ImageFormat
from iconprobe.services.image_service import ImageService


def _encode(mode, size, color, fmt):
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def service():
    return ImageService()


def test_decodes_png(service):
    image = service.decode(png_bytes(20, 10, (1, 2, 3, 4)))
    assert image.size == (20, 10)
    assert image.source_format is ImageFormat.PNG
    assert image.pixels()[0, 0].tolist() == [1, 2, 3, 4]


def test_decodes_jpeg_to_rgba(service):
    image = service.decode(_encode("RGB", (16, 8), (255, 255, 255), "JPEG"))
    assert image.size == (16, 8)
    assert image.mode == "RGBA"
    assert image.source_format is ImageFormat.JPEG


def test_decodes_bmp_file(service):
    image = service.decode(_encode("RGB", (5, 3), (0, 128, 255), "BMP"))
    assert image.size == (5, 3)
    assert image.source_format is ImageFormat.BMP
    assert image.pixels()[2, 4].tolist() == [0, 128, 255, 255]


@pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP")
def test_decodes_webp(service):
    image = service.decode(_encode("RGBA", (12, 12), (0, 0, 0, 255), "WEBP"))
    assert image.size == (12, 12)
    assert image.source_format is ImageFormat.WEBP


def test_decodes_ico(service):
    image = service.decode(ico_bytes([(16, 16, png_bytes(16, 16)), (48, 48, png_bytes(48, 48))]))
    assert image.size == (48, 48)
    assert image.source_format is ImageFormat.ICO


def test_unknown_bytes(service):
    with pytest.raises(UnsupportedFormat):
        service.decode(b"GIF89a\x01\x00\x01\x00")


def test_corrupt_jpeg(service):
    with pytest.raises(EmbeddedDecodeFailed) as excinfo:
        service.decode(b"\xff\xd8\xff\xe0" + bytes(16))
    assert isinstance(excinfo.value, IconDecodeError)


def test_settings_reach_dib_decoder():
    dib = dib_bytes(8, 8, 32, bytes(8 * 8 * 4))
    service = ImageService(settings=DecoderSettings(max_dimension=4))
    with pytest.raises(UnsupportedDibHeader):
        service.decode(ico_bytes([(8, 8, dib)]))
