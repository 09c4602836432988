"""
Pytest configuration and fixtures for the casedesk test suite.

Provides in-memory configuration stores, an adapter table with a fake gateway
key, a recording httpx mock transport and an in-process audio decoder.
"""
import math
import os
from array import array
import sys
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

# Add project root to Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '../'))
sys.path.insert(0, project_root)

from casedesk.ai.config import ConfigurationStore
from casedesk.ai.interfaces import ProviderIdentity
from casedesk.ai.providers import build_adapter_table
from casedesk.ai.schemas import ProviderConfig
from casedesk.data import InMemoryKeyValueStore
from casedesk.media.decoder import AudioDecoder, DecodedAudio, MediaInfo

GATEWAY_KEY = "gateway-test-key-0123456789"
OPENAI_KEY = "sk-test-openai-0123456789"
GROQ_KEY = "gsk-test-groq-0123456789"
ANTHROPIC_KEY = "sk-ant-test-0123456789"
GOOGLE_KEY = "AIza-test-google-0123456789"


class RecordingTransport:
    """Wraps a handler in an httpx.MockTransport and records every request."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)


class FakeDecoder(AudioDecoder):
    """In-process decoder returning a fixed sine wave."""

    def __init__(self, info: MediaInfo = None, capture: bytes = b"captured", sample_rate: int = 16000,
                 channels: int = 1, frames: int = 1600, fail_decode: bool = False):
        self.info = info or MediaInfo(duration=2.0, audio_streams=1, channels=channels, sample_rate=sample_rate)
        self.capture = capture
        self.sample_rate = sample_rate
        self.channels = channels
        self.frames = frames
        self.fail_decode = fail_decode
        self.calls: List[tuple] = []

    async def probe(self, data: bytes, filename: str) -> MediaInfo:
        self.calls.append(("probe", filename))
        return self.info

    async def decode(self, data: bytes, filename: str) -> DecodedAudio:
        self.calls.append(("decode", filename))
        if self.fail_decode:
            raise RuntimeError("corrupt stream")
        samples = array("f")
        for i in range(self.frames):
            value = 0.5 * math.sin(2 * math.pi * 440 * i / self.sample_rate)
            samples.extend([value] * self.channels)
        return DecodedAudio(sample_rate=self.sample_rate, num_channels=self.channels, samples=samples)

    async def capture_realtime(self, data: bytes, filename: str, timeout: float) -> bytes:
        self.calls.append(("capture", filename, timeout))
        return self.capture


@pytest.fixture
def backend():
    return InMemoryKeyValueStore()


@pytest.fixture
def config_store(backend):
    return ConfigurationStore(backend)


@pytest.fixture
def adapters():
    return build_adapter_table(gateway_key=GATEWAY_KEY)


@pytest.fixture
def fake_decoder():
    return FakeDecoder()


@pytest.fixture
def openai_config():
    return ProviderConfig(provider=ProviderIdentity.OPENAI, api_key=OPENAI_KEY)


@pytest.fixture
def groq_config():
    return ProviderConfig(provider=ProviderIdentity.GROQ, api_key=GROQ_KEY)


@pytest_asyncio.fixture
async def mock_client_factory():
    """Build httpx clients on recording transports; all are closed after the test."""
    clients = []

    def _create(handler: Callable[[httpx.Request], httpx.Response]):
        recorder = RecordingTransport(handler)
        client = recorder.client()
        clients.append(client)
        return recorder, client

    yield _create

    for client in clients:
        await client.aclose()
