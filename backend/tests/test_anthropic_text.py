"""Tests for the Anthropic-backed text adapter and its reply parsing."""

from types import SimpleNamespace

import pytest

from learning_lab.config import Settings
from learning_lab.errors import CapabilityError
from learning_lab.schemas.generation import KnowledgeAssessment, MindMap, SubjectClassification
from learning_lab.services.anthropic_text import (
    AnthropicTextService,
    extract_json_object,
    normalize_title,
    parse_structured,
)


class FakeMessages:
    def __init__(self, reply: str):
        self.reply = reply
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


def make_service(reply: str) -> tuple[AnthropicTextService, FakeMessages]:
    messages = FakeMessages(reply)
    client = SimpleNamespace(messages=messages)
    return AnthropicTextService(Settings(anthropic_api_key="test-key"), client=client), messages


class TestParsing:
    def test_extract_json_from_fenced_reply(self):
        reply = 'Here you go:\n```json\n{"subject": "Biology"}\n```'
        assert extract_json_object(reply) == '{"subject": "Biology"}'

    def test_extract_json_without_object(self):
        with pytest.raises(CapabilityError):
            extract_json_object("I cannot help with that.")

    def test_parse_classification(self):
        reply = '{"subject": "Physics", "category": "science", "icon": "⚛️", "confidence": 0.9}'

        result = parse_structured(reply, SubjectClassification)

        assert result.subject == "Physics"
        assert result.confidence == 0.9

    @pytest.mark.parametrize(
        "reply",
        [
            '{"subject": "Physics", "category": "science", "icon": "⚛️"}',
            '{"subject": "Physics", "category": "science", "icon": "⚛️", "confidence": 1.5}',
            '{"subject": "Physics", "category": }',
        ],
    )
    def test_parse_rejects_malformed_classification(self, reply):
        with pytest.raises(CapabilityError):
            parse_structured(reply, SubjectClassification)

    def test_parse_camel_case_mind_map(self):
        reply = '{"centralTopic": "Cells", "branches": [{"label": "Parts", "children": ["Nucleus"]}]}'

        result = parse_structured(reply, MindMap)

        assert result.central_topic == "Cells"
        assert result.branches[0].children == ["Nucleus"]

    def test_parse_knowledge_assessment(self):
        reply = """{
          "currentLevel": "intermediate",
          "strengthAreas": ["Biology"],
          "improvementAreas": ["Chemistry"],
          "learningGoals": [{"goal": "Balance equations", "difficulty": "hard", "estimatedTime": "3 weeks"}],
          "recommendations": ["Practice stoichiometry"],
          "assessmentQuestions": [
            {"question": "What do plants release?", "options": ["O2", "CO2"], "correctAnswer": 0, "topic": "Biology"}
          ]
        }"""

        result = parse_structured(reply, KnowledgeAssessment)

        assert result.current_level == "intermediate"
        assert result.learning_goals[0].estimated_time == "3 weeks"
        assert result.assessment_questions[0].correct_answer == 0


class TestNormalizeTitle:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"Photosynthesis Basics"', "Photosynthesis Basics"),
            ("**Understanding Plant Energy.**", "Understanding Plant Energy"),
            ("One Two Three Four Five Six Seven", "One Two Three Four Five"),
            ("\n\nCell Division\nExtra line", "Cell Division"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_title(raw) == expected

    def test_empty_title(self):
        with pytest.raises(CapabilityError):
            normalize_title('""')


class TestAnthropicTextService:
    async def test_classify_sends_prompt_and_parses(self):
        service, messages = make_service(
            '{"subject": "History", "category": "humanities", "icon": "🏛️", "confidence": 0.8}'
        )

        result = await service.classify("Who built the pyramids?")

        assert result.subject == "History"
        call = messages.calls[0]
        assert call["max_tokens"] == 150
        assert "Who built the pyramids?" in call["messages"][0]["content"]
        assert "system" not in call

    async def test_respond_passes_system_prompt(self):
        service, messages = make_service("Great question!")

        reply = await service.respond("You are a tutor.", "Explain gravity", max_tokens=42)

        assert reply == "Great question!"
        assert messages.calls[0]["system"] == "You are a tutor."
        assert messages.calls[0]["max_tokens"] == 42

    async def test_title_is_normalized(self):
        service, _ = make_service('"The Pyramids of Giza Explained Simply"')

        assert await service.title_for("Who built the pyramids?") == "The Pyramids of Giza Explained"

    async def test_empty_reply_is_an_error(self):
        service, _ = make_service("   ")

        with pytest.raises(CapabilityError):
            await service.respond("system", "hello")

    async def test_unconfigured_service_always_fails(self):
        service = AnthropicTextService(Settings(anthropic_api_key=None))

        with pytest.raises(CapabilityError):
            await service.classify("anything")
