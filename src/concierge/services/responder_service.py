"""
Guest reply orchestration.

Sequential flow per inbound message:
cache check -> classify -> retrieve -> history -> hotel profile -> prompt
-> completion -> tag extraction -> best-effort cache write.

Classification, profile and cache problems degrade quietly. Retrieval and
completion failures propagate as ``RetrievalError`` / ``CompletionError``;
what the guest sees in that case is up to the channel layer.
"""

from __future__ import annotations

import time
from contextlib import contextmanager, nullcontext
from threading import Lock
from typing import Dict, Iterator, List, Optional

from pydantic import ValidationError as PydanticValidationError

from concierge.models.conversation import (
    ChannelActions,
    Conversation,
    GuestContext,
    HistoryMessage,
    HotelProfile,
    InboundMessage,
)
from concierge.models.intent import UNKNOWN_INTENT
from concierge.models.knowledge import KnowledgeSearchResult
from concierge.models.provider import CompletionRequest
from concierge.models.response import (
    GuestReference,
    KnowledgeHit,
    Response,
    ResponseMetadata,
)
from concierge.repositories.history_repo import HistoryAccessor
from concierge.repositories.settings_repo import SettingsAccessor
from concierge.services.classification_service import IntentClassifier
from concierge.services.knowledge_service import KnowledgeService
from concierge.services.prompt_builder import DEFAULT_PERSONA, build_prompt_messages
from concierge.services.providers import CompletionProvider, EmbeddingProvider
from concierge.services.response_cache import ResponseCache
from concierge.services.tag_extractor import extract_signals
from concierge.utils.error_handling import CompletionError, RetrievalError
from concierge.utils.logging_config import get_logger, preview

logger = get_logger(__name__)

CACHE_CONFIDENCE_THRESHOLD = 0.7
CACHED_RESPONSE_CONFIDENCE = 0.9


class ConversationLocks:
    """One lock per conversation id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: Dict[str, Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, conversation_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(conversation_id, Lock())
            self._users[conversation_id] = self._users.get(conversation_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[conversation_id] -= 1
                if self._users[conversation_id] == 0:
                    del self._users[conversation_id]
                    del self._locks[conversation_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def has_guest_context(guest_context: Optional[GuestContext]) -> bool:
    return guest_context is not None and (
        guest_context.guest is not None or guest_context.reservation is not None
    )


class ResponderService:
    """Builds grounded replies from injected providers and accessors."""

    def __init__(
        self,
        provider: CompletionProvider,
        embedding_provider: Optional[EmbeddingProvider] = None,
        history: Optional[HistoryAccessor] = None,
        settings: Optional[SettingsAccessor] = None,
        knowledge: Optional[KnowledgeService] = None,
        classifier: Optional[IntentClassifier] = None,
        cache: Optional[ResponseCache] = None,
        max_context_messages: int = 10,
        max_knowledge_results: int = 3,
        min_knowledge_similarity: float = 0.3,
        max_tokens: int = 500,
        temperature: float = 0.7,
        serialize_per_conversation: bool = False,
        persona: str = DEFAULT_PERSONA,
    ) -> None:
        self.provider = provider
        self._knowledge = knowledge or KnowledgeService(embedding_provider or provider)
        self._classifier = classifier or IntentClassifier(provider)
        self._cache = cache
        self.history = history
        self.settings = settings
        self.max_context_messages = max_context_messages
        self.max_knowledge_results = max_knowledge_results
        self.min_knowledge_similarity = min_knowledge_similarity
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.persona = persona
        self._locks = ConversationLocks() if serialize_per_conversation else None

        logger.info(
            "Responder initialized",
            extra={
                "provider": getattr(provider, "name", "unknown"),
                "cache_enabled": cache is not None,
                "serialize_per_conversation": serialize_per_conversation,
            },
        )

    @property
    def knowledge(self) -> KnowledgeService:
        return self._knowledge

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    @property
    def cache(self) -> Optional[ResponseCache]:
        return self._cache

    def generate(
        self,
        conversation: Conversation,
        message: InboundMessage,
        guest_context: Optional[GuestContext] = None,
    ) -> Response:
        """Generate the reply for one inbound message."""
        guard = self._locks.hold(conversation.id) if self._locks else nullcontext()
        with guard:
            return self._generate(conversation, message, guest_context)

    def _generate(
        self,
        conversation: Conversation,
        message: InboundMessage,
        guest_context: Optional[GuestContext],
    ) -> Response:
        start = time.perf_counter()
        text = message.content
        can_use_cache = self._cache is not None and not has_guest_context(guest_context)

        logger.debug(
            "Generating response",
            extra={
                "conversation_id": conversation.id,
                "guest_message": preview(text),
                "has_guest_context": has_guest_context(guest_context),
            },
        )

        if can_use_cache:
            cached = self._cache.get(text)
            if cached:
                logger.info(
                    "Response served from cache",
                    extra={
                        "conversation_id": conversation.id,
                        "intent": cached.intent,
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                    },
                )
                return Response(
                    content=cached.response,
                    confidence=CACHED_RESPONSE_CONFIDENCE,
                    intent=cached.intent or UNKNOWN_INTENT,
                    metadata=ResponseMetadata(cached=True, cached_at=cached.created_at),
                )

        classification = self._classifier.classify(text)
        knowledge = self._retrieve(text)
        history = self._get_history(conversation.id)
        hotel_profile = self._get_hotel_profile()
        channel_actions = self._get_channel_actions(message)

        messages = build_prompt_messages(
            text,
            classification,
            knowledge,
            history,
            guest_context=guest_context,
            hotel_profile=hotel_profile,
            channel_actions=channel_actions,
            persona=self.persona,
        )

        try:
            completion = self.provider.complete(
                CompletionRequest(
                    messages=messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
            )
        except Exception as exc:
            logger.error(
                "Completion failed",
                extra={"conversation_id": conversation.id, "error": str(exc)},
            )
            raise CompletionError(f"Completion provider failed: {exc}") from exc

        signals = extract_signals(completion.content)

        logger.info(
            "Response generated",
            extra={
                "conversation_id": conversation.id,
                "intent": classification.intent,
                "confidence": classification.confidence,
                "knowledge_hits": len(knowledge),
                "suggested_action": signals.suggested_action,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

        if can_use_cache and classification.confidence > CACHE_CONFIDENCE_THRESHOLD:
            self._schedule_cache_write(text, signals.content, classification.intent)

        return Response(
            content=signals.content,
            confidence=classification.confidence,
            intent=classification.intent,
            metadata=ResponseMetadata(
                classification=classification,
                knowledge_context=[
                    KnowledgeHit(id=item.id, title=item.title, similarity=item.similarity)
                    for item in knowledge
                ],
                usage=completion.usage,
                suggested_action=signals.suggested_action,
                quick_replies=signals.quick_replies,
                guest_context=self._guest_reference(guest_context),
                cached=False,
            ),
        )

    def _retrieve(self, text: str) -> List[KnowledgeSearchResult]:
        try:
            return self._knowledge.search(
                text,
                limit=self.max_knowledge_results,
                min_similarity=self.min_knowledge_similarity,
            )
        except RetrievalError:
            raise
        except Exception as exc:
            raise RetrievalError(f"Knowledge retrieval failed: {exc}") from exc

    def _get_history(self, conversation_id: str) -> List[HistoryMessage]:
        if self.history is None or self.max_context_messages <= 0:
            return []
        messages = self.history.get_messages(conversation_id, limit=self.max_context_messages)
        return list(messages)[-self.max_context_messages:]

    def _get_hotel_profile(self) -> Optional[HotelProfile]:
        if self.settings is None:
            return None
        try:
            return self.settings.get_hotel_profile()
        except Exception as exc:
            logger.warning("Failed to load hotel profile", extra={"error": str(exc)})
            return None

    def _get_channel_actions(self, message: InboundMessage) -> Optional[ChannelActions]:
        try:
            return message.channel_actions()
        except PydanticValidationError as exc:
            logger.warning("Ignoring malformed channel actions", extra={"error": str(exc)})
            return None

    def _schedule_cache_write(self, text: str, content: str, intent: str) -> None:
        try:
            self._cache.set(text, content, intent)
        except Exception as exc:
            logger.error("Failed to schedule cache write", extra={"error": str(exc)})

    @staticmethod
    def _guest_reference(guest_context: Optional[GuestContext]) -> Optional[GuestReference]:
        if guest_context is None or guest_context.guest is None:
            return None
        reservation = guest_context.reservation
        return GuestReference(
            guest_id=guest_context.guest.id,
            guest_name=guest_context.guest.full_name,
            reservation_id=reservation.id if reservation else None,
            room_number=reservation.room_number if reservation else None,
        )
