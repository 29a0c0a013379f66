"""Integration tests for chatbot endpoints."""
from unittest.mock import patch

from fastapi.testclient import TestClient

from couples_chat.core.errors import Lookup, UpstreamError
from couples_chat.main import app
from couples_chat.models.chat import Conversation, Message
from couples_chat.models.knowledge import KnowledgeEntry, QueryPattern
from couples_chat.models.profile import Profile
from couples_chat.services.platform import create_platform

client = TestClient(app)

CHAT_URL = "/api/v1/chatbot/chat"
FEEDBACK_URL = "/api/v1/chatbot/feedback"


def test_health_check():
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_first_message_creates_conversation(db):
    response = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1"})

    assert response.status_code == 200
    data = response.json()
    assert data["message"].startswith("Hello! 💕 I'm One2One Love AI")
    assert data["featuresSuggested"] == []
    assert isinstance(data["messageId"], int)

    conversation = db.query(Conversation).filter(Conversation.id == data["conversationId"]).one()
    assert conversation.user_id == "u1"
    assert conversation.title == "Hello"
    messages = db.query(Message).order_by(Message.id).all()
    assert [(m.role, m.content) for m in messages] == [("user", "Hello"), ("assistant", data["message"])]
    assert messages[1].meta["model"] == "template"


def test_poem_request_in_existing_conversation(db):
    db.add(Profile(id="u1", subscription_tier="Premiere", partner_name="Sam"))
    db.commit()
    first = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1"}).json()

    response = client.post(
        CHAT_URL,
        json={
            "message": "Can you write me a poem for my partner?",
            "userId": "u1",
            "conversationId": first["conversationId"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["conversationId"] == first["conversationId"]
    assert "**A Love Note for Sam**" in data["message"]
    assert "your partner" not in data["message"]
    assert "AI Content Creator" in data["featuresSuggested"]
    assert db.query(Conversation).count() == 1
    assert db.query(Message).count() == 4


def test_unknown_conversation_id_starts_new_conversation(db):
    response = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1", "conversationId": "missing"})

    assert response.status_code == 200
    assert response.json()["conversationId"] != "missing"
    assert db.query(Conversation).count() == 1


def test_helpful_feedback_learns_query_pattern(db):
    chat = client.post(CHAT_URL, json={"message": "How do I send a love note", "userId": "u1"}).json()

    response = client.post(
        FEEDBACK_URL,
        json={
            "messageId": chat["messageId"],
            "conversationId": chat["conversationId"],
            "feedbackType": "helpful",
            "rating": 5,
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Thank you for your feedback! This helps us improve."}
    pattern = db.query(QueryPattern).one()
    assert pattern.pattern == "how do i send a love note"
    assert pattern.category == "feature_help"


def test_feature_help_returns_knowledge(db):
    db.add(KnowledgeEntry(title="Love Notes", content_type="faq", content="Open Love Notes and tap Send."))
    db.commit()

    response = client.post(CHAT_URL, json={"message": "How do I send a love note", "userId": "u1"})

    assert response.json()["message"].startswith("**Love Notes** (faq):\nOpen Love Notes and tap Send.")


def test_tenant_branding(db):
    create_platform(db, "acme", "Acme Love")

    response = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1", "platformKey": "acme"})

    assert response.status_code == 200
    assert "I'm Acme Love AI" in response.json()["message"]
    conversation = db.query(Conversation).one()
    assert conversation.platform_id is not None


def test_language_is_normalized(db):
    response = client.post(CHAT_URL, json={"message": "Hi", "userId": "u1", "language": "pt-BR"})

    assert response.json()["message"].startswith("Olá!")
    assert db.query(Conversation).one().language == "pt"


def test_chat_missing_fields():
    for body in ({}, {"message": "Hello"}, {"userId": "u1"}, {"message": "   ", "userId": "u1"}):
        response = client.post(CHAT_URL, json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Message and userId are required"}


def test_chat_malformed_body():
    response = client.post(CHAT_URL, json={"message": "x" * 4001, "userId": "u1"})
    assert response.status_code == 400
    assert "error" in response.json()


@patch("couples_chat.api.chat.generate_response")
def test_chat_upstream_failure_is_generic_500(mock_generate):
    mock_generate.side_effect = UpstreamError("Gemini API error: 503")

    response = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred processing your request."}


@patch("couples_chat.api.chat.search_knowledge_base")
def test_chat_survives_knowledge_failure(mock_search):
    mock_search.return_value = Lookup("", error="database is locked")

    response = client.post(CHAT_URL, json={"message": "How do I add a milestone?", "userId": "u1"})

    assert response.status_code == 200
    assert "Milestones" in response.json()["message"]


def test_cors_preflight():
    response = client.options(
        CHAT_URL,
        headers={"Origin": "https://partner.example", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_feedback_invalid_rating():
    response = client.post(
        FEEDBACK_URL,
        json={"messageId": 1, "conversationId": "c1", "feedbackType": "helpful", "rating": 7},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Rating must be between 1 and 5"}


def test_feedback_missing_fields():
    response = client.post(FEEDBACK_URL, json={"messageId": 1})
    assert response.status_code == 400
    assert "required" in response.json()["error"]


def test_conversation_endpoints():
    chat = client.post(CHAT_URL, json={"message": "Hello", "userId": "u1"}).json()
    conversation_id = chat["conversationId"]

    listed = client.get("/api/v1/chatbot/conversations", params={"userId": "u1"}).json()
    assert [c["id"] for c in listed] == [conversation_id]
    assert listed[0]["title"] == "Hello"

    messages = client.get(f"/api/v1/chatbot/conversations/{conversation_id}/messages").json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[1]["metadata"]["model"] == "template"

    assert client.delete(f"/api/v1/chatbot/conversations/{conversation_id}").status_code == 200
    response = client.get(f"/api/v1/chatbot/conversations/{conversation_id}/messages")
    assert response.status_code == 404
    assert response.json() == {"error": f"Conversation {conversation_id} not found"}


def test_promote_endpoint_with_nothing_pending():
    response = client.post("/api/v1/chatbot/learning/promote", json={})
    assert response.status_code == 200
    assert response.json() == {"promoted": 0}


def test_partner_name_with_backslash(db):
    db.add(Profile(id="u2", partner_name="Jo\\2"))
    db.commit()

    response = client.post(CHAT_URL, json={"message": "Write a poem", "userId": "u2"})

    assert response.status_code == 200
    assert "**A Love Note for Jo\\2**" in response.json()["message"]
