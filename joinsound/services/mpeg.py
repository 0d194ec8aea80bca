"""
MPEG audio frame walking.

Header-based length estimates (Xing/VBRI frame counts, or file size divided
by the first frame's bitrate) can be forged. mpeg_duration() instead walks
every frame header in the stream and adds up the samples each frame carries.
"""

from dataclasses import dataclass
from typing import BinaryIO, Optional

# Bitrates in kbps, indexed by the 4-bit bitrate field (0 = free format)
BITRATES = {
    (1, 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    (1, 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    (1, 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    (2, 1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    (2, 2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}

SAMPLE_RATES = {
    1: (44100, 48000, 32000),
    2: (22050, 24000, 16000),
    2.5: (11025, 12000, 8000),
}

VERSIONS = {0b00: 2.5, 0b10: 2, 0b11: 1}
LAYERS = {0b01: 3, 0b10: 2, 0b11: 1}

# Tags written into the first frame by encoders; that frame carries no audio
VBR_TAGS = (b"Xing", b"Info", b"VBRI")


@dataclass(frozen=True)
class FrameHeader:
    version: float
    layer: int
    bitrate: int
    sample_rate: int
    samples: int
    length: int

    @property
    def duration(self) -> float:
        return self.samples / self.sample_rate


def parse_frame_header(header: bytes) -> Optional[FrameHeader]:
    """Parse a 4-byte MPEG audio frame header, or return None if it isn't one."""
    if len(header) < 4 or header[0] != 0xFF or header[1] & 0xE0 != 0xE0:
        return None

    version = VERSIONS.get((header[1] >> 3) & 0x03)
    layer = LAYERS.get((header[1] >> 1) & 0x03)
    bitrate_index = header[2] >> 4
    rate_index = (header[2] >> 2) & 0x03
    padding = (header[2] >> 1) & 0x01
    if version is None or layer is None or bitrate_index in (0, 0x0F) or rate_index == 0x03:
        return None

    if version == 1:
        table = (1, layer)
    else:
        table = (2, 1 if layer == 1 else 2)
    bitrate = BITRATES[table][bitrate_index] * 1000
    sample_rate = SAMPLE_RATES[version][rate_index]

    if layer == 1:
        samples = 384
        length = (12 * bitrate // sample_rate + padding) * 4
    else:
        samples = 576 if layer == 3 and version != 1 else 1152
        length = samples // 8 * bitrate // sample_rate + padding

    return FrameHeader(version, layer, bitrate, sample_rate, samples, length)


def skip_id3v2(data: bytes) -> int:
    """Return the offset of the first byte after any leading ID3v2 tags."""
    pos = 0
    while data[pos:pos + 3] == b"ID3" and len(data) >= pos + 10:
        size = 0
        for byte in data[pos + 6:pos + 10]:
            size = (size << 7) | (byte & 0x7F)
        footer = 10 if data[pos + 5] & 0x10 else 0
        pos += 10 + size + footer
    return pos


def mpeg_duration(stream: BinaryIO) -> float:
    """
    Sum the playing time of every MPEG audio frame in the stream.

    Bytes between frames are skipped by scanning for the next sync word, the
    same way decoders recover from garbage. A frame cut short by the end of
    the stream still counts.
    """
    stream.seek(0)
    data = stream.read()

    pos = skip_id3v2(data)
    duration = 0.0
    first = True

    while pos + 4 <= len(data):
        frame = parse_frame_header(data[pos:pos + 4])
        if frame is None:
            pos = data.find(b"\xff", pos + 1)
            if pos == -1:
                break
            continue

        if not (first and any(tag in data[pos + 4:pos + 44] for tag in VBR_TAGS)):
            duration += frame.duration
        first = False
        pos += frame.length

    return duration
