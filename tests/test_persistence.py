"""Tests for persistence repositories and the async LocalStore."""

import asyncio
import threading
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from core.errors import NotFoundError, PersistenceError
from core.models import Artifact, Attachment, Chat, Message, MessageRole, Project, ProjectFile
from core.persistence import (
    ChatRepository,
    Database,
    LocalStore,
    MessageRepository,
    ProjectFileRepository,
    ProjectRepository,
    SettingsRepository,
)


def test_persistence_roundtrip(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    chat_repo = ChatRepository(db)
    message_repo = MessageRepository(db)
    settings_repo = SettingsRepository(db)

    chat = Chat.create("Chat One")
    chat_repo.create(chat)
    chats = chat_repo.get_all()
    assert len(chats) == 1
    assert chats[0].title == "Chat One"

    attachment = Attachment.create("a.txt", "/tmp/a.txt", "text/plain", 3)
    context = Attachment.create("p.md", "/tmp/p.md", "text/markdown", is_project_file=True)
    message = Message.create(chat.id, MessageRole.USER, "Hello", attachments=[attachment, context])
    message_repo.add(message)
    reply = Message.create(
        chat.id,
        MessageRole.ASSISTANT,
        "Hi",
        timestamp=message.timestamp + timedelta(seconds=1),
    )
    reply.artifacts = [Artifact(id="x", content="body", type="text/markdown", title="Doc")]
    message_repo.add(reply)

    messages = message_repo.get_by_chat(chat.id)
    assert [m.content for m in messages] == ["Hello", "Hi"]
    assert [a.name for a in messages[0].attachments] == ["a.txt", "p.md"]
    assert messages[0].attachments[1].is_project_file is True
    assert messages[1].artifacts == reply.artifacts

    settings_repo.set("models.default", "claude", "models")
    assert settings_repo.get_value("models.default") == "claude"


def test_deleting_chat_cascades_to_messages(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    chat_repo = ChatRepository(db)
    message_repo = MessageRepository(db)
    chat = Chat.create()
    chat_repo.create(chat)
    message = Message.create(
        chat.id,
        MessageRole.USER,
        "bye",
        attachments=[Attachment.create("f", "/f", "text/plain")],
    )
    message_repo.add(message)

    assert chat_repo.delete(chat.id) is True

    assert message_repo.get_by_chat(chat.id) == []
    assert message_repo.get_by_id(message.id) is None


def test_message_update_marks_edit(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    chat = Chat.create()
    ChatRepository(db).create(chat)
    repo = MessageRepository(db)
    message = Message.create(chat.id, MessageRole.USER, "draft")
    repo.add(message)

    message.content = "final"
    message.is_edited = True
    assert repo.update(message) is True

    stored = repo.get_by_id(message.id)
    assert stored.content == "final"
    assert stored.is_edited is True
    assert stored.role == MessageRole.USER


def test_search_messages(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    chat = Chat.create("Recipes")
    ChatRepository(db).create(chat)
    repo = MessageRepository(db)
    base = datetime(2024, 1, 1, 12, 0)
    repo.add(Message.create(chat.id, MessageRole.USER, "How to bake Bread?", timestamp=base))
    repo.add(Message.create(chat.id, MessageRole.ASSISTANT, "bread needs flour", timestamp=base + timedelta(minutes=1)))
    repo.add(Message.create(chat.id, MessageRole.USER, "100% rye", timestamp=base + timedelta(minutes=2)))

    results = repo.search("bread")
    assert [r["content"] for r in results] == ["bread needs flour", "How to bake Bread?"]
    assert results[0]["chat_title"] == "Recipes"
    assert results[0]["chat_id"] == chat.id

    assert [r["content"] for r in repo.search("100%")] == ["100% rye"]
    assert repo.search("0_r") == []


def test_projects_and_files(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    projects = ProjectRepository(db)
    files = ProjectFileRepository(db)
    project = Project.create("Docs", "all the docs")
    projects.create(project)
    project_file = ProjectFile.create(project.id, "guide.md", "/store/guide.md", "text/markdown", 12)
    files.add(project_file)

    loaded = projects.get_by_id(project.id)
    assert loaded.description == "all the docs"
    assert loaded.files == []
    assert [f.name for f in files.get_by_project(project.id)] == ["guide.md"]

    project_file.name = "renamed.md"
    assert files.update(project_file) is True
    assert files.get_by_project(project.id)[0].name == "renamed.md"

    projects.delete(project.id)
    assert files.get_by_project(project.id) == []


def test_settings_repository_helpers(tmp_path: Path) -> None:
    repo = SettingsRepository(Database(tmp_path / "settings.db"))

    repo.set("int.value", "not-int", "test")
    assert repo.get_int("int.value", 7) == 7
    repo.set("float.value", "0.25", "test")
    assert repo.get_float("float.value", 1.0) == 0.25
    assert repo.get_float("missing", 0.5) == 0.5
    assert repo.get_value("missing", "fallback") == "fallback"


def test_attachment_may_repeat_across_messages(tmp_path: Path) -> None:
    db = Database(tmp_path / "test.db")
    chat = Chat.create()
    ChatRepository(db).create(chat)
    message_repo = MessageRepository(db)
    context = Attachment.create("p.md", "/store/p.md", "text/markdown", is_project_file=True)

    first = Message.create(chat.id, MessageRole.USER, "one", attachments=[context, context])
    second = Message.create(
        chat.id,
        MessageRole.USER,
        "two",
        attachments=[context],
        timestamp=first.timestamp + timedelta(seconds=1),
    )
    message_repo.add(first)
    message_repo.add(second)

    stored = message_repo.get_by_chat(chat.id)
    assert [len(m.attachments) for m in stored] == [2, 1]
    assert {a.id for m in stored for a in m.attachments} == {context.id}


class TestLocalStore:
    """Tests for the async persistence facade."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> LocalStore:
        return LocalStore(Database(tmp_path / "store.db"))

    @pytest.mark.asyncio
    async def test_chat_and_message_flow(self, store):
        chat = Chat.create("Hello")
        await store.create_chat(chat)
        await store.create_message(Message.create(chat.id, MessageRole.USER, "hi there"))

        assert [c.id for c in await store.get_chats()] == [chat.id]
        assert (await store.get_chat(chat.id)).title == "Hello"
        assert len(await store.get_messages_by_chat(chat.id)) == 1
        assert (await store.search_messages("there"))[0]["chat_title"] == "Hello"
        assert await store.search_messages("   ") == []

    @pytest.mark.asyncio
    async def test_update_missing_chat_raises_not_found(self, store):
        with pytest.raises(NotFoundError):
            await store.update_chat(Chat.create("ghost"))

    @pytest.mark.asyncio
    async def test_sqlite_errors_become_persistence_errors(self, store):
        chat = Chat.create()
        await store.create_chat(chat)

        with pytest.raises(PersistenceError):
            await store.create_chat(chat)

    @pytest.mark.asyncio
    async def test_message_for_unknown_chat_is_rejected(self, store):
        with pytest.raises(PersistenceError):
            await store.create_message(Message.create("missing", MessageRole.USER, "x"))

    @pytest.mark.asyncio
    async def test_project_file_flow(self, store):
        project = Project.create("P")
        await store.create_project(project)
        project_file = ProjectFile.create(project.id, "a.txt", "/a.txt", "text/plain")
        await store.create_project_file(project_file)

        assert [p.id for p in await store.get_projects()] == [project.id]
        assert [f.id for f in await store.get_project_files(project.id)] == [project_file.id]

        await store.delete_project_file(project_file.id)
        assert await store.get_project_files(project.id) == []

    @pytest.mark.asyncio
    async def test_queries_run_off_the_event_loop_thread(self, store, monkeypatch):
        threads = []
        original = store._chats.get_all

        def recording_get_all():
            threads.append(threading.get_ident())
            return original()

        monkeypatch.setattr(store._chats, "get_all", recording_get_all)

        await asyncio.gather(store.get_chats(), store.get_chats())

        assert len(threads) == 2
        assert threading.get_ident() not in threads

    @pytest.mark.asyncio
    async def test_close_releases_worker_connections(self, tmp_path: Path):
        database = Database(tmp_path / "close.db")
        store = LocalStore(database)
        chat = Chat.create()
        await store.create_chat(chat)

        database.close()

        assert database._connections == []
        assert [c.id for c in await store.get_chats()] == [chat.id]
        database.close()
