"""
Tests for Whisper-compatible transcription through the openai SDK.
"""
import httpx
import pytest

from casedesk.ai.interfaces import ErrorKind, ProviderIdentity
from casedesk.ai.schemas import ProviderConfig
from casedesk.ai.transcription import select_transcription_provider, transcribe
from casedesk.media.decoder import MediaInfo
from casedesk.media.transcoder import MediaFile, MediaTranscoder

from conftest import FakeDecoder, OPENAI_KEY


def _mp3() -> MediaFile:
    return MediaFile(name="call.mp3", content_type="audio/mpeg", data=b"ID3" + b"\x00" * 64)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class TestTranscribe:

    @pytest.mark.asyncio
    async def test_openai_transcription(self, mock_client_factory, fake_decoder, openai_config):
        recorder, client = mock_client_factory(lambda request: httpx.Response(200, json={"text": " olá mundo "}))

        result = await transcribe(_mp3(), openai_config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.ok
        assert result.text == "olá mundo"
        assert result.model == "whisper-1"
        assert result.metadata["converted"] is False
        request = recorder.requests[0]
        assert str(request.url) == "https://api.openai.com/v1/audio/transcriptions"
        assert request.headers["authorization"] == f"Bearer {OPENAI_KEY}"
        assert b"whisper-1" in request.content

    @pytest.mark.asyncio
    async def test_groq_uses_groq_endpoint(self, mock_client_factory, fake_decoder, groq_config):
        recorder, client = mock_client_factory(lambda request: httpx.Response(200, json={"text": "ok"}))

        result = await transcribe(_mp3(), groq_config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.model == "whisper-large-v3"
        assert str(recorder.requests[0].url) == "https://api.groq.com/openai/v1/audio/transcriptions"

    @pytest.mark.asyncio
    async def test_ogg_is_converted_before_upload(self, mock_client_factory, fake_decoder, openai_config):
        recorder, client = mock_client_factory(lambda request: httpx.Response(200, json={"text": "ok"}))
        media = MediaFile(name="note.ogg", content_type="audio/ogg", data=b"OggS")

        result = await transcribe(media, openai_config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.metadata["converted"] is True
        assert result.metadata["file_name"] == "note.wav"
        assert b'filename="note.wav"' in recorder.requests[0].content

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, mock_client_factory, fake_decoder):
        recorder, client = mock_client_factory(_unreachable)
        config = ProviderConfig(provider=ProviderIdentity.ANTHROPIC, api_key="sk-ant-test-0123456789")

        result = await transcribe(_mp3(), config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.error == ErrorKind.NO_PROVIDER_AVAILABLE
        assert recorder.call_count == 0

    @pytest.mark.asyncio
    async def test_masked_key_makes_no_call(self, mock_client_factory, fake_decoder):
        recorder, client = mock_client_factory(_unreachable)
        config = ProviderConfig(provider=ProviderIdentity.OPENAI, api_key="••••1234")

        result = await transcribe(_mp3(), config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.error == ErrorKind.MASKED_CREDENTIAL
        assert recorder.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code, expected", [
        (401, ErrorKind.AUTH_FAILURE),
        (429, ErrorKind.RATE_LIMITED),
        (413, ErrorKind.BAD_REQUEST),
        (500, ErrorKind.UPSTREAM_ERROR),
    ])
    async def test_status_errors(self, mock_client_factory, fake_decoder, openai_config, status_code, expected):
        recorder, client = mock_client_factory(
            lambda request: httpx.Response(status_code, json={"error": {"message": "nope"}})
        )

        result = await transcribe(_mp3(), openai_config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.error == expected
        assert recorder.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_error(self, mock_client_factory, fake_decoder, openai_config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        _, client = mock_client_factory(handler)
        result = await transcribe(_mp3(), openai_config, transcoder=MediaTranscoder(fake_decoder), http_client=client)

        assert result.error == ErrorKind.CONNECTIVITY_FAILURE

    @pytest.mark.asyncio
    async def test_video_without_audio(self, mock_client_factory, openai_config):
        recorder, client = mock_client_factory(_unreachable)
        decoder = FakeDecoder(info=MediaInfo(duration=4.0, audio_streams=0))
        media = MediaFile(name="screen.mov", content_type="video/quicktime", data=b"moov")

        result = await transcribe(media, openai_config, transcoder=MediaTranscoder(decoder), http_client=client)

        assert result.error == ErrorKind.NO_AUDIO_TRACK
        assert recorder.call_count == 0


class TestSelectTranscriptionProvider:

    def test_default_configuration_has_no_transcription_provider(self, config_store):
        assert select_transcription_provider(config_store) is None

    def test_first_capable_enabled_provider(self, config_store, groq_config):
        config_store.upsert_provider(groq_config)
        assert select_transcription_provider(config_store).provider == ProviderIdentity.GROQ

    def test_explicit_provider_must_be_enabled(self, config_store, openai_config):
        config_store.upsert_provider(openai_config.model_copy(update={"enabled": False}))
        assert select_transcription_provider(config_store, ProviderIdentity.OPENAI) is None
