"""
Pydantic model validation tests.

Run with: pytest tests/unit/test_models.py -v
"""

import pytest
from pydantic import ValidationError


class TestKnowledgeModels:
    """Test knowledge base models."""

    def test_create_defaults(self):
        from concierge.models import KnowledgeCategory, KnowledgeItemCreate, KnowledgeStatus

        item = KnowledgeItemCreate(category="faq", title="  Wifi  ", content=" Network: Harbour-Guest ")
        assert item.category == KnowledgeCategory.FAQ
        assert item.title == "Wifi"
        assert item.content == "Network: Harbour-Guest"
        assert item.priority == 5
        assert item.status == KnowledgeStatus.ACTIVE
        assert item.keywords == []

    @pytest.mark.parametrize("field, value", [("title", "   "), ("content", ""), ("priority", 11), ("priority", 0)])
    def test_create_rejects_invalid(self, field, value):
        from concierge.models import KnowledgeItemCreate

        payload = {"category": "faq", "title": "Wifi", "content": "Network", field: value}
        with pytest.raises(ValidationError):
            KnowledgeItemCreate(**payload)

    def test_unknown_category_rejected(self):
        from concierge.models import KnowledgeItemCreate

        with pytest.raises(ValidationError):
            KnowledgeItemCreate(category="spa", title="Spa", content="Open daily")

    def test_update_only_sets_given_fields(self):
        from concierge.models import KnowledgeItemUpdate

        update = KnowledgeItemUpdate(priority=7)
        assert update.model_dump(exclude_none=True) == {"priority": 7}

    def test_update_strips_and_rejects_blank_text(self):
        from concierge.models import KnowledgeItemUpdate

        assert KnowledgeItemUpdate(content="  Pool opens at 7am.  ").content == "Pool opens at 7am."
        with pytest.raises(ValidationError):
            KnowledgeItemUpdate(content="   ")
        with pytest.raises(ValidationError):
            KnowledgeItemUpdate(title="\t")

    def test_search_options_bounds(self):
        from concierge.models import SearchOptions

        assert SearchOptions(query="pool").limit == 5
        with pytest.raises(ValidationError):
            SearchOptions(query="pool", limit=0)
        with pytest.raises(ValidationError):
            SearchOptions(query="")


class TestConversationModels:
    """Test inbound message and guest context models."""

    def test_inbound_message_strips_content(self):
        from concierge.models import InboundMessage

        assert InboundMessage(content="  Hello ").content == "Hello"

    def test_inbound_message_rejects_blank(self):
        from concierge.models import InboundMessage

        with pytest.raises(ValidationError):
            InboundMessage(content="   ")

    def test_channel_actions_from_metadata(self):
        from concierge.models import InboundMessage

        message = InboundMessage(
            content="Extend my stay",
            metadata={
                "channel_actions": {
                    "actions": [{"id": "extend-stay", "trigger_hint": "stay longer", "requires_verification": True}],
                    "verification_status": "verified",
                }
            },
        )
        actions = message.channel_actions()
        assert actions.is_verified is True
        assert actions.actions[0].requires_verification is True

    def test_no_channel_actions(self):
        from concierge.models import InboundMessage

        assert InboundMessage(content="hi").channel_actions() is None

    def test_guest_context_optional_parts(self):
        from concierge.models import GuestContext

        context = GuestContext.model_validate({"reservation": None})
        assert context.guest is None
        assert context.reservation is None

    def test_history_direction_enum(self):
        from concierge.models import HistoryMessage, MessageDirection

        message = HistoryMessage(direction="outbound", content="Hello!")
        assert message.direction == MessageDirection.OUTBOUND


class TestIntentModels:
    """Test classification models."""

    def test_unknown_result(self):
        from concierge.models import UNKNOWN_INTENT, ClassificationResult

        result = ClassificationResult.unknown()
        assert result.intent == UNKNOWN_INTENT
        assert result.confidence == 0.0
        assert result.department is None
        assert result.requires_action is False

    @pytest.mark.parametrize("confidence", [-0.1, 1.1])
    def test_confidence_bounds(self, confidence):
        from concierge.models import ClassificationResult

        with pytest.raises(ValidationError):
            ClassificationResult(intent="greeting", confidence=confidence)


class TestResponseModels:
    """Test reply models."""

    def test_response_defaults(self):
        from concierge.models import Response

        response = Response(content="Checkout is at 11am.", confidence=0.9, intent="inquiry.checkout")
        assert response.metadata.cached is False
        assert response.metadata.knowledge_context == []
        assert response.metadata.quick_replies is None

    def test_response_serializes(self):
        from concierge.models import KnowledgeHit, Response, ResponseMetadata

        response = Response(
            content="Pool opens at 7am.",
            confidence=0.8,
            intent="inquiry.amenity",
            metadata=ResponseMetadata(knowledge_context=[KnowledgeHit(id="k1", title="Pool hours", similarity=0.7)]),
        )
        assert '"title":"Pool hours"' in response.model_dump_json()


class TestEnums:
    """Test enum values."""

    def test_category_enum_values(self):
        from concierge.models import KnowledgeCategory

        assert KnowledgeCategory.FAQ.value == "faq"
        assert KnowledgeCategory.ROOM_TYPE.value == "room_type"
        assert KnowledgeCategory.LOCAL_INFO.value == "local_info"

    def test_message_role_values(self):
        from concierge.models import MessageRole

        assert [role.value for role in MessageRole] == ["system", "user", "assistant"]
