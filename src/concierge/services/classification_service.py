"""
Guest intent classification service.

One low-temperature completion maps a guest message onto the closed intent
taxonomy. Any failure degrades to the ``unknown`` intent; ``classify`` never
raises.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from concierge.models.intent import UNKNOWN_INTENT, ClassificationResult, IntentDefinition
from concierge.models.provider import CompletionMessage, CompletionRequest, MessageRole
from concierge.services.intent_taxonomy import INTENT_TAXONOMY
from concierge.services.providers import CompletionProvider
from concierge.utils.logging_config import get_logger, preview

logger = get_logger(__name__)


class ClassificationParseError(ValueError):
    """Model output held no usable classification."""


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first JSON object embedded anywhere in ``text``."""
    decoder = json.JSONDecoder()
    position = text.find("{")
    while position != -1:
        try:
            value, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            position = text.find("{", position + 1)
            continue
        if isinstance(value, dict):
            return value
        position = text.find("{", position + 1)
    raise ClassificationParseError("No JSON object found in response")


def _clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return min(1.0, max(0.0, confidence))


@dataclass
class IntentClassifier:
    """Encapsulates LLM classification with a safe ``unknown`` fallback."""

    provider: CompletionProvider
    taxonomy: Dict[str, IntentDefinition] = field(default_factory=lambda: dict(INTENT_TAXONOMY))
    max_tokens: int = 150
    temperature: float = 0.1

    def __post_init__(self) -> None:
        self._system_prompt = self._build_system_prompt()
        logger.info(
            "Intent classifier initialized",
            extra={"provider": getattr(self.provider, "name", "unknown"), "intents": len(self.taxonomy)},
        )

    def classify(self, text: str) -> ClassificationResult:
        """Classify a guest message. Never raises."""
        start = time.perf_counter()
        try:
            response = self.provider.complete(
                CompletionRequest(
                    messages=[
                        CompletionMessage(role=MessageRole.SYSTEM, content=self._system_prompt),
                        CompletionMessage(role=MessageRole.USER, content=self._build_user_prompt(text)),
                    ],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
            )
            result = self._parse_response(response.content)
            logger.info(
                "Message classified",
                extra={
                    "guest_message": preview(text, 30),
                    "intent": result.intent,
                    "confidence": result.confidence,
                },
            )
            return result
        except ClassificationParseError as exc:
            logger.warning(
                "Failed to parse classification",
                extra={"guest_message": preview(text), "error": str(exc)},
            )
        except Exception as exc:
            logger.error(
                "Classification failed",
                extra={"guest_message": preview(text), "error": str(exc)},
            )
        finally:
            logger.debug(
                "Classification latency captured",
                extra={"duration_ms": int((time.perf_counter() - start) * 1000)},
            )
        return ClassificationResult.unknown()

    def classify_batch(self, texts: List[str]) -> List[ClassificationResult]:
        """Classify several messages sequentially."""
        return [self.classify(text) for text in texts]

    def _build_system_prompt(self) -> str:
        intent_list = "\n".join(
            f"- {name}: {definition.description}" for name, definition in self.taxonomy.items()
        )
        return (
            "You are an intent classifier for a hotel concierge system. Your task is to "
            "classify guest messages into one of the following intents:\n\n"
            f"{intent_list}\n\n"
            "Respond ONLY with a JSON object in this exact format:\n"
            "{\n"
            '  "intent": "<intent_name>",\n'
            '  "confidence": <0.0-1.0>,\n'
            '  "reasoning": "<brief explanation>"\n'
            "}\n\n"
            "Rules:\n"
            "- Choose the most specific matching intent\n"
            f'- Use "{UNKNOWN_INTENT}" only if no intent matches\n'
            "- Confidence should reflect how well the message matches the intent"
        )

    def _build_user_prompt(self, text: str) -> str:
        return f'Classify this guest message:\n\n"{text}"\n\nRespond with JSON only.'

    def _parse_response(self, content: str) -> ClassificationResult:
        parsed = extract_json_object(content or "")
        intent = parsed.get("intent")
        if not isinstance(intent, str) or intent not in self.taxonomy:
            raise ClassificationParseError(f"Unknown intent: {intent!r}")

        definition = self.taxonomy[intent]
        reasoning: Optional[str] = parsed.get("reasoning")
        return ClassificationResult(
            intent=intent,
            confidence=_clamp_confidence(parsed.get("confidence")),
            department=definition.department,
            requires_action=definition.requires_action,
            reasoning=reasoning if isinstance(reasoning, str) else None,
        )
