"""Pydantic models shared by services and handlers."""

from concierge.models.conversation import (  # noqa: F401
    ChannelActionHint,
    ChannelActions,
    Conversation,
    Guest,
    GuestContext,
    GuestPreference,
    HistoryMessage,
    HotelProfile,
    InboundMessage,
    MessageDirection,
    Reservation,
)
from concierge.models.intent import (  # noqa: F401
    UNKNOWN_INTENT,
    ClassificationResult,
    IntentDefinition,
    IntentPriority,
)
from concierge.models.knowledge import (  # noqa: F401
    KnowledgeCategory,
    KnowledgeEmbedding,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemUpdate,
    KnowledgeSearchResult,
    KnowledgeStats,
    KnowledgeStatus,
    SearchOptions,
)
from concierge.models.provider import (  # noqa: F401
    CompletionMessage,
    CompletionRequest,
    CompletionResponse,
    EmbeddingRequest,
    EmbeddingResponse,
    MessageRole,
    TokenUsage,
)
from concierge.models.response import (  # noqa: F401
    CachedResponse,
    GuestReference,
    KnowledgeHit,
    Response,
    ResponseMetadata,
)
