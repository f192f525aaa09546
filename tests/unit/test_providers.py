"""
Bedrock provider and wiring tests with a mocked runtime client.

Run with: pytest tests/unit/test_providers.py -v
"""

import io
import json
from unittest.mock import MagicMock

import pytest

from concierge.config.settings import Settings
from concierge.models.provider import CompletionMessage, CompletionRequest, EmbeddingRequest, MessageRole
from concierge.services.factory import build_responder
from concierge.services.providers import (
    ANTHROPIC_VERSION,
    BedrockProvider,
    CompletionProvider,
    EmbeddingProvider,
    _to_anthropic_messages,
)


def _body(payload):
    return {"body": io.BytesIO(json.dumps(payload).encode())}


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(client):
    return BedrockProvider(model_id="chat-model", embedding_model_id="embed-model", client=client)


class TestBedrockProvider:
    def test_satisfies_both_protocols(self, provider):
        assert isinstance(provider, CompletionProvider)
        assert isinstance(provider, EmbeddingProvider)
        assert provider.name == "embed-model"

    def test_complete_builds_anthropic_request(self, provider, client):
        client.invoke_model.return_value = _body(
            {
                "content": [{"type": "text", "text": "Checkout is "}, {"type": "text", "text": "at 11am."}],
                "usage": {"input_tokens": 210, "output_tokens": 9},
            }
        )
        response = provider.complete(
            CompletionRequest(
                messages=[
                    CompletionMessage(role=MessageRole.SYSTEM, content="You are Max."),
                    CompletionMessage(role=MessageRole.USER, content="What time is checkout?"),
                ],
                max_tokens=500,
                temperature=0.7,
            )
        )

        assert response.content == "Checkout is at 11am."
        assert response.usage.input_tokens == 210
        assert response.usage.output_tokens == 9

        kwargs = client.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "chat-model"
        body = json.loads(kwargs["body"])
        assert body["anthropic_version"] == ANTHROPIC_VERSION
        assert body["system"] == "You are Max."
        assert body["max_tokens"] == 500
        assert body["messages"] == [
            {"role": "user", "content": [{"type": "text", "text": "What time is checkout?"}]}
        ]

    def test_complete_error_propagates(self, provider, client):
        client.invoke_model.side_effect = RuntimeError("ThrottlingException")
        with pytest.raises(RuntimeError):
            provider.complete(
                CompletionRequest(messages=[CompletionMessage(role=MessageRole.USER, content="hi")])
            )

    def test_embed(self, provider, client):
        client.invoke_model.return_value = _body({"embedding": [0.1, 0.2, 0.3], "inputTextTokenCount": 4})
        response = provider.embed(EmbeddingRequest(text="pool hours"))

        assert response.embedding == [0.1, 0.2, 0.3]
        assert response.usage.input_tokens == 4
        kwargs = client.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "embed-model"
        assert json.loads(kwargs["body"]) == {"inputText": "pool hours"}

    def test_consecutive_turns_merged(self):
        converted = _to_anthropic_messages(
            [
                CompletionMessage(role=MessageRole.SYSTEM, content="rules"),
                CompletionMessage(role=MessageRole.ASSISTANT, content="Welcome!"),
                CompletionMessage(role=MessageRole.USER, content="Hi"),
                CompletionMessage(role=MessageRole.USER, content="Pool hours?"),
            ]
        )
        assert [turn["role"] for turn in converted] == ["assistant", "user"]
        assert converted[1]["content"][0]["text"] == "Hi\n\nPool hours?"


class TestFactory:
    def test_build_responder_from_settings(self):
        settings = Settings(database_url="sqlite:///:memory:", cache_enabled=False, max_knowledge_results=2)
        responder = build_responder(settings)

        assert responder.cache is None
        assert responder.max_knowledge_results == 2
        assert responder.knowledge.get_stats().total_items == 0

    def test_cache_enabled(self):
        responder = build_responder(Settings(database_url="sqlite:///:memory:", cache_ttl_seconds=120))
        try:
            assert responder.cache.ttl_seconds == 120
        finally:
            responder.cache.close()
