"""
Tests for joinsound/services/mpeg.py - frame header parsing and walking.
"""

import io

import pytest

from conftest import MP3_FRAME_HEADER, MP3_FRAME_SIZE, make_mp3, mpeg_frame
from joinsound.services.mpeg import mpeg_duration, parse_frame_header, skip_id3v2


class TestParseFrameHeader:

    def test_mpeg1_layer3(self):
        frame = parse_frame_header(MP3_FRAME_HEADER)

        assert frame.version == 1
        assert frame.layer == 3
        assert frame.bitrate == 128000
        assert frame.sample_rate == 44100
        assert frame.samples == 1152
        assert frame.length == MP3_FRAME_SIZE

    def test_padding_adds_a_byte(self):
        frame = parse_frame_header(bytes([0xFF, 0xFB, 0x92, 0x64]))
        assert frame.length == MP3_FRAME_SIZE + 1

    def test_mpeg2_layer3_has_half_the_samples(self):
        # MPEG-2, layer III, 64 kbps, 22.05 kHz
        frame = parse_frame_header(bytes([0xFF, 0xF3, 0x80, 0xC4]))

        assert frame.samples == 576
        assert frame.sample_rate == 22050
        assert frame.length == 576 // 8 * 64000 // 22050

    @pytest.mark.parametrize("header", [
        b"\x00\x00\x00\x00",
        b"ID3\x04",
        bytes([0xFF, 0xFB, 0x00, 0x64]),  # free format
        bytes([0xFF, 0xFB, 0xF0, 0x64]),  # bad bitrate index
        bytes([0xFF, 0xFB, 0x9C, 0x64]),  # reserved sample rate
        bytes([0xFF, 0xEB, 0x90, 0x64]),  # reserved version
        bytes([0xFF, 0xF9, 0x90, 0x64]),  # reserved layer
        b"\xFF\xFB",
    ])
    def test_rejects_non_headers(self, header):
        assert parse_frame_header(header) is None


class TestMpegDuration:

    def test_counts_every_frame(self):
        data = mpeg_frame(MP3_FRAME_HEADER, MP3_FRAME_SIZE) * 50
        assert mpeg_duration(io.BytesIO(data)) == pytest.approx(50 * 1152 / 44100)

    def test_skips_id3v2_tag(self):
        tag = b"ID3\x04\x00\x00\x00\x00\x01\x00" + bytes(128)
        data = tag + make_mp3(1.0)

        assert skip_id3v2(data) == 10 + 128
        assert mpeg_duration(io.BytesIO(data)) == pytest.approx(mpeg_duration(io.BytesIO(make_mp3(1.0))))

    def test_resyncs_past_garbage(self):
        frames = mpeg_frame(MP3_FRAME_HEADER, MP3_FRAME_SIZE) * 10
        data = frames + b"junk bytes" + frames

        assert mpeg_duration(io.BytesIO(data)) == pytest.approx(20 * 1152 / 44100)

    def test_no_frames(self):
        assert mpeg_duration(io.BytesIO(bytes(256))) == 0

    def test_reads_from_start(self):
        stream = io.BytesIO(make_mp3(1.0))
        stream.seek(0, io.SEEK_END)
        assert mpeg_duration(stream) > 0
