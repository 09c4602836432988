"""
Audio decoders used by the media transcoder.

``AudioDecoder`` is the seam the transcoder talks to; ``FFmpegDecoder``
implements it with ``ffprobe``/``ffmpeg`` run as asyncio subprocesses on a
temporary copy of the input.
"""
import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from array import array
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from ..ai.interfaces import DecodeFailureError, NoAudioTrackError
from .wav import float32le_to_samples

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 48000
_READ_CHUNK = 64 * 1024


@dataclass
class MediaInfo:
    """Result of probing a media file."""
    duration: Optional[float] = None
    audio_streams: int = 0
    channels: int = 0
    sample_rate: int = 0

    @property
    def has_audio(self) -> bool:
        return self.audio_streams > 0


@dataclass
class DecodedAudio:
    """Decoded float PCM, channels interleaved frame by frame."""
    sample_rate: int
    num_channels: int = 1
    samples: array = field(default_factory=lambda: array("f"))

    @property
    def num_frames(self) -> int:
        return len(self.samples) // max(self.num_channels, 1)

    def channel(self, index: int) -> array:
        return self.samples[index::max(self.num_channels, 1)]


class AudioDecoder(ABC):
    """Abstract decoder for probing, decoding and real-time capture."""

    @abstractmethod
    async def probe(self, data: bytes, filename: str) -> MediaInfo:
        """Report duration and audio streams of a media file."""
        pass

    @abstractmethod
    async def decode(self, data: bytes, filename: str) -> DecodedAudio:
        """
        Decode the first audio stream to float PCM.

        Raises:
            NoAudioTrackError: If the media has no audio stream
            DecodeFailureError: If the media cannot be decoded
        """
        pass

    @abstractmethod
    async def capture_realtime(self, data: bytes, filename: str, timeout: float) -> bytes:
        """
        Play the media at wall-clock speed and record its audio track.

        The capture is bounded by ``timeout`` seconds; when the bound is hit,
        whatever was recorded so far is returned (possibly empty).

        Returns:
            bytes: Captured audio as a WAV stream, decodable with ``decode``
        """
        pass


class FFmpegDecoder(AudioDecoder):
    """Decoder backed by the ffmpeg command line tools."""

    def __init__(self, ffmpeg_binary: str = "ffmpeg", ffprobe_binary: str = "ffprobe"):
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary

    @staticmethod
    def _write_temp(directory: str, data: bytes, filename: str) -> str:
        suffix = Path(filename).suffix or ".bin"
        path = os.path.join(directory, f"input{suffix}")
        with open(path, "wb") as f:
            f.write(data)
        return path

    async def _run(self, *args: str) -> Tuple[int, bytes, bytes]:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError:
            raise DecodeFailureError(f"Media tool not found: {args[0]}", error_code="tool_missing")
        stdout, stderr = await process.communicate()
        return process.returncode, stdout, stderr

    async def _probe_path(self, path: str) -> MediaInfo:
        returncode, stdout, stderr = await self._run(
            self.ffprobe_binary, "-v", "error",
            "-show_entries", "format=duration:stream=codec_type,channels,sample_rate",
            "-of", "json", path
        )
        if returncode != 0:
            raise DecodeFailureError(
                f"ffprobe failed: {stderr.decode('utf-8', 'replace').strip()[:200]}",
                error_code="probe_failed"
            )

        try:
            report = json.loads(stdout or b"{}")
        except json.JSONDecodeError as e:
            raise DecodeFailureError(f"Unreadable ffprobe output: {e}", error_code="probe_failed")

        audio = [s for s in report.get("streams", []) if s.get("codec_type") == "audio"]
        duration = report.get("format", {}).get("duration")
        info = MediaInfo(
            duration=float(duration) if duration not in (None, "N/A") else None,
            audio_streams=len(audio)
        )
        if audio:
            info.channels = int(audio[0].get("channels") or 0)
            info.sample_rate = int(audio[0].get("sample_rate") or 0)
        return info

    async def probe(self, data: bytes, filename: str) -> MediaInfo:
        with tempfile.TemporaryDirectory(prefix="casedesk-") as directory:
            path = self._write_temp(directory, data, filename)
            info = await self._probe_path(path)
        logger.debug(f"🔍 Probed {filename}: duration={info.duration} audio_streams={info.audio_streams}")
        return info

    async def decode(self, data: bytes, filename: str) -> DecodedAudio:
        with tempfile.TemporaryDirectory(prefix="casedesk-") as directory:
            path = self._write_temp(directory, data, filename)
            info = await self._probe_path(path)
            if not info.has_audio:
                raise NoAudioTrackError(f"No audio stream to decode in {filename}", error_code="no_audio_track")

            channels = info.channels or 1
            sample_rate = info.sample_rate or DEFAULT_SAMPLE_RATE
            returncode, stdout, stderr = await self._run(
                self.ffmpeg_binary, "-nostdin", "-v", "error", "-i", path,
                "-vn", "-ac", str(channels), "-ar", str(sample_rate),
                "-f", "f32le", "-acodec", "pcm_f32le", "pipe:1"
            )

        if returncode != 0 or not stdout:
            raise DecodeFailureError(
                f"ffmpeg decode failed: {stderr.decode('utf-8', 'replace').strip()[:200]}",
                error_code="decode_failed"
            )
        return DecodedAudio(sample_rate=sample_rate, num_channels=channels, samples=float32le_to_samples(stdout))

    async def capture_realtime(self, data: bytes, filename: str, timeout: float) -> bytes:
        captured = bytearray()
        with tempfile.TemporaryDirectory(prefix="casedesk-") as directory:
            path = self._write_temp(directory, data, filename)
            try:
                process = await asyncio.create_subprocess_exec(
                    self.ffmpeg_binary, "-nostdin", "-v", "error", "-re", "-i", path,
                    "-vn", "-acodec", "pcm_s16le", "-f", "wav", "pipe:1",
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.DEVNULL
                )
            except FileNotFoundError:
                raise DecodeFailureError(f"Media tool not found: {self.ffmpeg_binary}", error_code="tool_missing")

            async def _pump() -> int:
                while True:
                    chunk = await process.stdout.read(_READ_CHUNK)
                    if not chunk:
                        break
                    captured.extend(chunk)
                return await process.wait()

            try:
                returncode = await asyncio.wait_for(_pump(), timeout=timeout)
                if returncode != 0:
                    logger.warning(f"⚠️ Real-time capture of {filename} exited with code {returncode}")
            except asyncio.TimeoutError:
                logger.warning(f"⏱️ Real-time capture of {filename} hit the {timeout:.1f}s bound, keeping partial audio")
                if process.returncode is None:
                    try:
                        process.kill()
                    except ProcessLookupError:
                        # Exited between the timeout and the kill
                        pass
                await process.wait()

        logger.debug(f"🎙️ Captured {len(captured)} bytes from {filename}")
        return bytes(captured)
