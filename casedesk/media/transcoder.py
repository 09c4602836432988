"""
Media transcoder: makes uploads acceptable to Whisper-style transcription APIs.

Files the APIs accept are passed through untouched. Everything else is
decoded and re-encoded as 16-bit PCM WAV. Video audio tracks are recorded by
playing the file at wall-clock speed, so converting a video takes roughly as
long as the video itself (bounded by its duration plus one second).
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from ..ai.interfaces import DecodeFailureError, NoAudioTrackError, TranscodingError
from .decoder import AudioDecoder, DecodedAudio, FFmpegDecoder
from .wav import encode_interleaved_wav

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset({"mp3", "mp4", "mpeg", "mpga", "m4a", "wav", "webm"})
OGG_MIME_TYPES = frozenset({"audio/ogg", "application/ogg"})
VIDEO_EXTENSIONS = frozenset({"mov", "mkv", "avi", "wmv", "flv", "m4v", "3gp"})
WAV_MIME_TYPE = "audio/wav"
CAPTURE_GRACE_SECONDS = 1.0


@dataclass
class MediaFile:
    """An uploaded media file held in memory."""
    name: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        return PurePath(self.name).suffix.lstrip(".").lower()

    @property
    def stem(self) -> str:
        path = PurePath(self.name)
        return path.stem if path.suffix else self.name


def is_ogg(media: MediaFile) -> bool:
    return media.extension == "ogg" or (media.content_type or "").lower() in OGG_MIME_TYPES


def is_transcodable(media: MediaFile) -> bool:
    """True when the file can be sent to the transcription API as is."""
    return media.extension in SUPPORTED_EXTENSIONS and not is_ogg(media)


def is_video(media: MediaFile) -> bool:
    return (media.content_type or "").lower().startswith("video/") or media.extension in VIDEO_EXTENSIONS


class MediaTranscoder:
    """
    Converts unsupported media to canonical WAV.

    Args:
        decoder: Decoder used for probing, decoding and capture
        realtime_capture: Record video audio at wall-clock speed instead of decoding directly
    """

    def __init__(self, decoder: Optional[AudioDecoder] = None, realtime_capture: bool = True):
        self.decoder = decoder or FFmpegDecoder()
        self.realtime_capture = realtime_capture

    async def ensure_transcodable(self, media: MediaFile) -> MediaFile:
        """
        Return the media unchanged if accepted, otherwise a WAV conversion.

        Raises:
            NoAudioTrackError: If a video has no audio stream
            DecodeFailureError: If decoding or capture fails
        """
        if is_transcodable(media):
            return media

        logger.info(f"🔄 Converting {media.name} ({media.content_type or 'unknown type'}) to WAV")
        try:
            if is_video(media):
                decoded = await self._decode_video(media)
            else:
                decoded = await self.decoder.decode(media.data, media.name)
        except TranscodingError:
            raise
        except Exception as e:
            logger.error(f"❌ Decoding {media.name} failed: {e}")
            raise DecodeFailureError(f"Could not decode {media.name}: {e}")

        if decoded.num_frames == 0:
            raise DecodeFailureError(f"No audio samples decoded from {media.name}")

        # PCM conversion is CPU bound; keep it off the event loop
        wav_bytes = await asyncio.to_thread(
            encode_interleaved_wav, decoded.samples, decoded.num_channels, decoded.sample_rate
        )
        logger.info(
            f"✅ Converted {media.name}: {decoded.num_channels}ch {decoded.sample_rate}Hz, {len(wav_bytes)} bytes"
        )
        return MediaFile(name=f"{media.stem}.wav", content_type=WAV_MIME_TYPE, data=wav_bytes)

    async def _decode_video(self, media: MediaFile) -> DecodedAudio:
        info = await self.decoder.probe(media.data, media.name)
        if not info.has_audio:
            raise NoAudioTrackError(f"Video {media.name} has no audio track", error_code="no_audio_track")

        if not self.realtime_capture or info.duration is None:
            return await self.decoder.decode(media.data, media.name)

        timeout = info.duration + CAPTURE_GRACE_SECONDS
        logger.info(f"🎙️ Capturing audio of {media.name} in real time (up to {timeout:.1f}s)")
        captured = await self.decoder.capture_realtime(media.data, media.name, timeout)
        if not captured:
            raise DecodeFailureError(f"Nothing captured from {media.name}", error_code="empty_capture")
        return await self.decoder.decode(captured, f"{media.stem}-capture.wav")


async def ensure_transcodable(media: MediaFile, transcoder: Optional[MediaTranscoder] = None) -> MediaFile:
    """Convenience wrapper around MediaTranscoder.ensure_transcodable."""
    return await (transcoder or MediaTranscoder()).ensure_transcodable(media)
