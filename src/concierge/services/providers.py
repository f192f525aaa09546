"""
Completion and embedding providers.

Services depend on the ``CompletionProvider`` / ``EmbeddingProvider``
protocols and receive concrete providers through their constructors. The
Bedrock implementation talks to ``bedrock-runtime`` with Anthropic messages
for completions and Titan for embeddings.
"""

from __future__ import annotations

import json
import os
import time
from typing import List, Optional, Protocol, runtime_checkable

import boto3

from concierge.models.provider import (
    CompletionMessage,
    CompletionRequest,
    CompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    MessageRole,
    TokenUsage,
)
from concierge.utils.logging_config import get_logger

logger = get_logger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"


@runtime_checkable
class CompletionProvider(Protocol):
    name: str

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        ...


@runtime_checkable
class EmbeddingProvider(Protocol):
    name: str

    def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        ...


class BedrockProvider:
    """Bedrock runtime client covering both provider protocols."""

    def __init__(
        self,
        model_id: str = "anthropic.claude-3-haiku-20240307-v1:0",
        embedding_model_id: str = "amazon.titan-embed-text-v2:0",
        region: Optional[str] = None,
        client=None,
    ):
        self.model_id = model_id
        self.embedding_model_id = embedding_model_id
        self.name = embedding_model_id
        resolved_region = (
            region
            or os.environ.get("BEDROCK_REGION")
            or os.environ.get("AWS_REGION")
            or "eu-west-2"
        )
        self.client = client or boto3.client("bedrock-runtime", region_name=resolved_region)

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Invoke the chat model; system turns are folded into ``system``."""
        start = time.perf_counter()
        system_prompt = "\n\n".join(
            m.content for m in request.messages if m.role == MessageRole.SYSTEM
        )
        body = {
            "anthropic_version": ANTHROPIC_VERSION,
            "messages": _to_anthropic_messages(request.messages),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        if system_prompt:
            body["system"] = system_prompt

        response = self.client.invoke_model(
            modelId=self.model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(body),
        )
        payload = json.loads(response["body"].read())
        text = "".join(
            block.get("text", "")
            for block in payload.get("content", [])
            if block.get("type") == "text"
        )
        usage = payload.get("usage") or {}

        logger.info(
            "Completion finished",
            extra={
                "model_id": self.model_id,
                "duration_ms": int((time.perf_counter() - start) * 1000),
                "output_tokens": usage.get("output_tokens", 0),
            },
        )
        return CompletionResponse(
            content=text,
            usage=TokenUsage(
                input_tokens=usage.get("input_tokens", 0),
                output_tokens=usage.get("output_tokens", 0),
            ),
        )

    def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """Embed a single text with the Titan embedding model."""
        response = self.client.invoke_model(
            modelId=self.embedding_model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps({"inputText": request.text}),
        )
        payload = json.loads(response["body"].read())
        return EmbeddingResponse(
            embedding=payload["embedding"],
            usage=TokenUsage(input_tokens=payload.get("inputTextTokenCount", 0)),
        )


def _to_anthropic_messages(messages: List[CompletionMessage]) -> List[dict]:
    """Drop system turns and merge consecutive same-role turns."""
    converted: List[dict] = []
    for message in messages:
        if message.role == MessageRole.SYSTEM:
            continue
        role = message.role.value
        if converted and converted[-1]["role"] == role:
            converted[-1]["content"][0]["text"] += "\n\n" + message.content
            continue
        converted.append({"role": role, "content": [{"type": "text", "text": message.content}]})
    return converted
