"""
Media handling: WAV encoding, decoding and transcoding for transcription.
"""
from .decoder import AudioDecoder, DecodedAudio, FFmpegDecoder, MediaInfo
from .transcoder import MediaFile, MediaTranscoder, ensure_transcodable, is_transcodable
from .wav import WavHeader, decode_pcm16, encode_interleaved_wav, encode_wav, parse_wav_header

__all__ = [
    'AudioDecoder', 'DecodedAudio', 'FFmpegDecoder', 'MediaInfo',
    'MediaFile', 'MediaTranscoder', 'ensure_transcodable', 'is_transcodable',
    'WavHeader', 'decode_pcm16', 'encode_interleaved_wav', 'encode_wav', 'parse_wav_header',
]
