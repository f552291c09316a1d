"""Repository behaviour shared by the in-memory and SQL implementations."""

import asyncio
from uuid import uuid4

import pytest

from learning_lab.db.models import MessageRole
from learning_lab.errors import NotFoundError


class TestConversations:
    async def test_list_most_recently_updated_first(self, repository):
        first = await repository.create_conversation("u1", "First")
        await asyncio.sleep(0.01)
        second = await repository.create_conversation("u1", "Second")
        await repository.create_conversation("u2", "Someone else's")
        await asyncio.sleep(0.01)

        await repository.update_conversation(first.id)

        conversations = await repository.list_conversations("u1")
        assert [c.id for c in conversations] == [first.id, second.id]

    async def test_update_title(self, repository):
        conversation = await repository.create_conversation("u1", "New Learning Session")

        updated = await repository.update_conversation(conversation.id, title="🧬 Cells")

        assert updated.title == "🧬 Cells"
        assert (await repository.get_conversation(conversation.id)).title == "🧬 Cells"

    async def test_update_missing_conversation(self, repository):
        assert await repository.update_conversation(uuid4(), title="x") is None

    async def test_delete_removes_messages(self, repository):
        conversation = await repository.create_conversation("u1", "Doomed")
        for i in range(5):
            role = MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT
            await repository.create_message(conversation.id, role, f"message {i}")

        assert await repository.delete_conversation(conversation.id) is True

        assert await repository.list_messages(conversation.id) == []
        assert await repository.get_conversation(conversation.id) is None
        assert await repository.list_conversations("u1") == []

    async def test_delete_missing_conversation(self, repository):
        assert await repository.delete_conversation(uuid4()) is False

    async def test_clear_only_touches_one_user(self, repository):
        mine = [await repository.create_conversation("u1", f"Mine {i}") for i in range(2)]
        theirs = await repository.create_conversation("u2", "Theirs")
        await repository.create_message(mine[0].id, MessageRole.USER, "hello")
        await repository.create_message(theirs.id, MessageRole.USER, "hi")

        assert await repository.clear_conversations("u1") == 2

        assert await repository.list_conversations("u1") == []
        assert await repository.list_messages(mine[0].id) == []
        assert [c.id for c in await repository.list_conversations("u2")] == [theirs.id]
        assert len(await repository.list_messages(theirs.id)) == 1


class TestMessages:
    async def test_messages_in_creation_order(self, repository):
        conversation = await repository.create_conversation("u1", "Chat")
        for text in ["one", "two", "three"]:
            await repository.create_message(conversation.id, MessageRole.USER, text)

        messages = await repository.list_messages(conversation.id)

        assert [m.content for m in messages] == ["one", "two", "three"]
        assert await repository.count_messages(conversation.id) == 3

    async def test_assistant_message_with_visuals(self, repository):
        conversation = await repository.create_conversation("u1", "Chat")
        mind_map = {"centralTopic": "Cells", "branches": [{"label": "Parts", "children": ["Nucleus"]}]}

        message = await repository.create_message(
            conversation.id,
            MessageRole.ASSISTANT,
            "Cells are the basic unit of life.",
            image_url="https://images.example.com/cell.png",
            mind_map_data=mind_map,
        )

        stored = (await repository.list_messages(conversation.id))[0]
        assert stored.id == message.id
        assert stored.role == "assistant"
        assert stored.image_url == "https://images.example.com/cell.png"
        assert stored.mind_map_data == mind_map

    async def test_unknown_conversation_has_no_messages(self, repository):
        assert await repository.list_messages(uuid4()) == []
        assert await repository.count_messages(uuid4()) == 0


class TestInterests:
    async def test_create_list_delete(self, repository):
        interest = await repository.create_interest("u1", "Astronomy", progress=10)
        await repository.create_interest("u2", "Chemistry")

        assert [(i.interest, i.progress) for i in await repository.list_interests("u1")] == [
            ("Astronomy", 10)
        ]

        assert await repository.delete_interest("u1", interest.id) is True
        assert await repository.list_interests("u1") == []

    async def test_delete_requires_owner(self, repository):
        interest = await repository.create_interest("u1", "Astronomy")

        assert await repository.delete_interest("u2", interest.id) is False
        assert len(await repository.list_interests("u1")) == 1


class TestLearningProgress:
    async def test_upsert_overwrites_existing_row(self, repository):
        await repository.upsert_learning_progress("u1", "Biology", 5, 1)
        updated = await repository.upsert_learning_progress("u1", "Biology", 10, 2)

        rows = await repository.list_progress("u1")
        assert len(rows) == 1
        assert rows[0].progress_percentage == 10
        assert rows[0].visuals_generated == 2
        assert updated.progress_percentage == 10

    async def test_upsert_keys_on_user_and_topic(self, repository):
        await repository.upsert_learning_progress("u1", "Biology", 5, 0)
        await repository.upsert_learning_progress("u1", "Physics", 5, 0)
        await repository.upsert_learning_progress("u2", "Biology", 5, 0)

        assert {row.topic for row in await repository.list_progress("u1")} == {"Biology", "Physics"}
        assert len(await repository.list_progress("u2")) == 1


class TestSqlSpecifics:
    async def test_message_for_unknown_conversation_is_not_found(self, sql_repository):
        with pytest.raises(NotFoundError):
            await sql_repository.create_message(uuid4(), MessageRole.USER, "orphan")

        # Session is still usable after the failed insert
        conversation = await sql_repository.create_conversation("u1", "Chat")
        assert await sql_repository.get_conversation(conversation.id) is not None

    async def test_memory_stores_orphan_message(self, memory_repository):
        conversation_id = uuid4()

        await memory_repository.create_message(conversation_id, MessageRole.USER, "orphan")

        assert await memory_repository.count_messages(conversation_id) == 1
