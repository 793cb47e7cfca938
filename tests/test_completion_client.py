from types import SimpleNamespace

import pytest

from chatboat.config import Settings
from chatboat.services import completion_client
from chatboat.services.completion_client import CompletionClient


class FakeChatModel:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.messages = None
        FakeChatModel.instances.append(self)

    def invoke(self, messages):
        self.messages = messages
        return SimpleNamespace(content=[{"type": "text", "text": "Hello"}, " there"])


@pytest.fixture
def fake_model(monkeypatch):
    FakeChatModel.instances = []
    monkeypatch.setattr(completion_client, "ChatGoogleGenerativeAI", FakeChatModel)
    return FakeChatModel


@pytest.fixture
def client():
    return CompletionClient(Settings(google_api_key="test-key", google_max_tokens=512, google_temperature=0.5))


def test_complete_sends_system_and_user_messages(client, fake_model):
    answer = client.complete("Be brief.", "Hi")

    assert answer == "Hello there"
    model = fake_model.instances[0]
    assert [m.content for m in model.messages] == ["Be brief.", "Hi"]
    assert model.messages[0].type == "system"
    assert model.messages[1].type == "human"
    assert model.kwargs["max_output_tokens"] == 512
    assert model.kwargs["temperature"] == 0.5
    assert model.kwargs["api_key"] == "test-key"


def test_complete_overrides(client, fake_model):
    client.complete("Summarize.", "text", max_tokens=1000, temperature=0.0, timeout=120)

    kwargs = fake_model.instances[0].kwargs
    assert kwargs["max_output_tokens"] == 1000
    assert kwargs["temperature"] == 0.0
    assert kwargs["timeout"] == 120


def test_is_configured():
    assert CompletionClient(Settings(google_api_key="key")).is_configured()
    assert not CompletionClient(Settings(google_api_key="")).is_configured()
