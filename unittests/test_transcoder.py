"""
Tests for the media transcoder with an in-process decoder.
"""
import asyncio
import struct

import pytest

from casedesk.ai.interfaces import DecodeFailureError, ErrorKind, NoAudioTrackError
from casedesk.media.decoder import FFmpegDecoder, MediaInfo
from casedesk.media.transcoder import MediaFile, MediaTranscoder, ensure_transcodable, is_transcodable
from casedesk.media.wav import parse_wav_header

from conftest import FakeDecoder


class TestIsTranscodable:

    @pytest.mark.parametrize("name", ["call.mp3", "clip.MP4", "voice.m4a", "rec.wav", "screen.webm", "a.mpga"])
    def test_allow_listed_extensions(self, name):
        assert is_transcodable(MediaFile(name=name, content_type="", data=b""))

    @pytest.mark.parametrize("name, content_type", [
        ("note.ogg", "audio/ogg"),
        ("note.ogg", ""),
        ("note.webm", "audio/ogg"),
        ("note.mp3", "application/ogg"),
    ])
    def test_ogg_is_never_accepted(self, name, content_type):
        assert not is_transcodable(MediaFile(name=name, content_type=content_type, data=b""))

    def test_unknown_extension_needs_conversion(self):
        assert not is_transcodable(MediaFile(name="meeting.mov", content_type="video/quicktime", data=b""))


class TestEnsureTranscodable:

    @pytest.mark.asyncio
    async def test_allowed_input_is_returned_as_is(self, fake_decoder):
        media = MediaFile(name="call.mp3", content_type="audio/mpeg", data=b"ID3...")
        result = await MediaTranscoder(decoder=fake_decoder).ensure_transcodable(media)
        assert result is media
        assert fake_decoder.calls == []

    @pytest.mark.asyncio
    async def test_ogg_audio_is_decoded_to_wav(self, fake_decoder):
        media = MediaFile(name="voice.note.ogg", content_type="audio/ogg", data=b"OggS")

        result = await MediaTranscoder(decoder=fake_decoder).ensure_transcodable(media)

        assert result.name == "voice.note.wav"
        assert result.content_type == "audio/wav"
        header = parse_wav_header(result.data)
        assert (header.num_channels, header.sample_rate, header.bits_per_sample) == (1, 16000, 16)
        assert header.data_size == 2 * fake_decoder.frames
        assert fake_decoder.calls == [("decode", "voice.note.ogg")]

    @pytest.mark.asyncio
    async def test_video_is_captured_in_real_time(self):
        decoder = FakeDecoder(info=MediaInfo(duration=12.5, audio_streams=1, channels=2, sample_rate=48000),
                              channels=2, sample_rate=48000)
        media = MediaFile(name="meeting.mov", content_type="video/quicktime", data=b"moov")

        result = await MediaTranscoder(decoder=decoder, realtime_capture=True).ensure_transcodable(media)

        assert result.name == "meeting.wav"
        assert decoder.calls[0] == ("probe", "meeting.mov")
        assert decoder.calls[1] == ("capture", "meeting.mov", 13.5)
        assert decoder.calls[2][0] == "decode"
        assert parse_wav_header(result.data).num_channels == 2

    @pytest.mark.asyncio
    async def test_video_direct_decode_when_capture_disabled(self, fake_decoder):
        media = MediaFile(name="clip.mkv", content_type="video/x-matroska", data=b"\x1a\x45")
        await MediaTranscoder(decoder=fake_decoder, realtime_capture=False).ensure_transcodable(media)
        assert [call[0] for call in fake_decoder.calls] == ["probe", "decode"]

    @pytest.mark.asyncio
    async def test_video_without_audio_track(self):
        decoder = FakeDecoder(info=MediaInfo(duration=3.0, audio_streams=0))
        media = MediaFile(name="silent.mov", content_type="video/quicktime", data=b"moov")

        with pytest.raises(NoAudioTrackError) as exc_info:
            await MediaTranscoder(decoder=decoder).ensure_transcodable(media)
        assert exc_info.value.error_kind == ErrorKind.NO_AUDIO_TRACK

    @pytest.mark.asyncio
    async def test_empty_capture_is_decode_failure(self):
        decoder = FakeDecoder(capture=b"")
        media = MediaFile(name="broken.avi", content_type="video/x-msvideo", data=b"RIFF")

        with pytest.raises(DecodeFailureError):
            await MediaTranscoder(decoder=decoder).ensure_transcodable(media)

    @pytest.mark.asyncio
    async def test_decoder_errors_become_decode_failure(self):
        decoder = FakeDecoder(fail_decode=True)
        media = MediaFile(name="voice.ogg", content_type="audio/ogg", data=b"OggS")

        with pytest.raises(DecodeFailureError) as exc_info:
            await MediaTranscoder(decoder=decoder).ensure_transcodable(media)
        assert exc_info.value.error_kind == ErrorKind.DECODE_FAILURE

    @pytest.mark.asyncio
    async def test_no_samples_is_decode_failure(self):
        decoder = FakeDecoder(frames=0)
        media = MediaFile(name="voice.ogg", content_type="audio/ogg", data=b"OggS")

        with pytest.raises(DecodeFailureError):
            await MediaTranscoder(decoder=decoder).ensure_transcodable(media)


class _SlowStdout:
    """Stream that yields a few bytes and then blocks forever."""

    def __init__(self):
        self._sent = False

    async def read(self, n):
        if not self._sent:
            self._sent = True
            return b"RIFFpartial"
        await asyncio.sleep(3600)


class _FakeProcess:
    def __init__(self):
        self.stdout = _SlowStdout()
        self.killed = False
        self.returncode = None

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        if not self.killed:
            await asyncio.sleep(3600)
        return self.returncode


class _ExitingProcess(_FakeProcess):
    """Process that exits on its own just as the capture bound is hit."""

    def __init__(self):
        super().__init__()
        self.kill_attempted = False

    def kill(self):
        self.kill_attempted = True
        self.returncode = 0
        raise ProcessLookupError()

    async def wait(self):
        return self.returncode


class TestFFmpegCapture:

    @pytest.mark.asyncio
    async def test_timeout_kills_process_and_keeps_partial_capture(self, monkeypatch):
        process = _FakeProcess()

        async def fake_exec(*args, **kwargs):
            assert "-re" in args
            return process

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        captured = await FFmpegDecoder().capture_realtime(b"data", "clip.mov", timeout=0.05)

        assert process.killed
        assert captured == b"RIFFpartial"

    @pytest.mark.asyncio
    async def test_missing_binary_is_decode_failure(self, monkeypatch):
        async def fake_exec(*args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        with pytest.raises(DecodeFailureError):
            await FFmpegDecoder(ffprobe_binary="missing-ffprobe").probe(b"data", "clip.mov")


    @pytest.mark.asyncio
    async def test_process_exiting_at_the_bound_is_not_an_error(self, monkeypatch):
        process = _ExitingProcess()

        async def fake_exec(*args, **kwargs):
            return process

        monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

        captured = await FFmpegDecoder().capture_realtime(b"data", "clip.mov", timeout=0.05)

        assert process.kill_attempted
        assert captured == b"RIFFpartial"


class TestFFmpegDecode:

    @pytest.mark.asyncio
    async def test_audio_without_stream_is_no_audio_track(self, monkeypatch):
        async def fake_probe(self, path):
            return MediaInfo(duration=4.0, audio_streams=0)

        monkeypatch.setattr(FFmpegDecoder, "_probe_path", fake_probe)
        media = MediaFile(name="note.ogg", content_type="audio/ogg", data=b"OggS")

        with pytest.raises(NoAudioTrackError) as exc_info:
            await MediaTranscoder(decoder=FFmpegDecoder()).ensure_transcodable(media)
        assert exc_info.value.error_kind == ErrorKind.NO_AUDIO_TRACK

    @pytest.mark.asyncio
    async def test_decoded_pcm_is_kept_in_a_float_array(self, monkeypatch):
        async def fake_probe(self, path):
            return MediaInfo(duration=0.1, audio_streams=1, channels=2, sample_rate=8000)

        async def fake_run(self, *args):
            assert "f32le" in args
            return 0, struct.pack("<4f", 0.5, -0.5, 0.25, -0.25), b""

        monkeypatch.setattr(FFmpegDecoder, "_probe_path", fake_probe)
        monkeypatch.setattr(FFmpegDecoder, "_run", fake_run)

        decoded = await FFmpegDecoder().decode(b"OggS", "note.ogg")

        assert decoded.samples.typecode == "f"
        assert (decoded.num_channels, decoded.num_frames, decoded.sample_rate) == (2, 2, 8000)
        assert list(decoded.channel(0)) == [0.5, 0.25]
        assert list(decoded.channel(1)) == [-0.5, -0.25]


@pytest.mark.asyncio
async def test_module_level_helper_passes_allowed_media_through():
    media = MediaFile(name="call.wav", content_type="audio/wav", data=b"RIFF")
    assert await ensure_transcodable(media) is media
