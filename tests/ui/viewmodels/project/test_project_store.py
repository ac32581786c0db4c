"""Tests for ProjectStore."""

from unittest.mock import AsyncMock

import pytest

from core.errors import NotFoundError, PersistenceError
from core.models import PendingFile, Project, ProjectFile
from ui.services.file_service import UploadResult
from ui.viewmodels.project import ProjectStore


@pytest.fixture
def persistence():
    store = AsyncMock()
    store.get_projects.return_value = []
    store.get_project_files.return_value = []
    return store


@pytest.fixture
def file_service():
    service = AsyncMock()
    service.upload_file.return_value = UploadResult(success=True, path="/store/abc_guide.md")
    service.delete_file.return_value = True
    return service


@pytest.fixture
def store(persistence, file_service):
    return ProjectStore(persistence, file_service)


@pytest.mark.asyncio
async def test_load_projects_populates_files(store, persistence):
    healthy, broken = Project.create("Healthy"), Project.create("Broken")
    guide = ProjectFile.create(healthy.id, "guide.md", "/store/guide.md", "text/markdown")
    persistence.get_projects.return_value = [healthy, broken]

    async def files_for(project_id):
        if project_id == broken.id:
            raise PersistenceError("corrupt row")
        return [guide]

    persistence.get_project_files.side_effect = files_for

    projects = await store.load_projects()

    assert [p.title for p in projects] == ["Healthy", "Broken"]
    assert projects[0].files == [guide]
    assert projects[1].files == []
    assert store.state.projects_loaded
    assert store.state.error is None

    await store.load_projects()
    persistence.get_projects.assert_awaited_once()


@pytest.mark.asyncio
async def test_load_projects_failure(store, persistence):
    persistence.get_projects.side_effect = PersistenceError("locked")

    assert await store.load_projects() == []
    assert isinstance(store.state.error, PersistenceError)


@pytest.mark.asyncio
async def test_create_update_delete_project(store, persistence):
    project = await store.create_project("Research", "notes")
    assert store.state.find_project(project.id) is not None

    updated = await store.update_project(project.id, {"title": "Thesis", "files": ["x"]})
    assert updated.title == "Thesis"
    assert updated.files == []
    persistence.update_project.assert_awaited_once_with(updated)

    store.set_active_project(project.id)
    assert store.state.active_project.id == project.id

    assert await store.delete_project(project.id)
    assert store.state.active_project is None
    assert store.state.projects == ()


@pytest.mark.asyncio
async def test_set_unknown_active_project(store):
    assert store.set_active_project("missing") is None
    assert isinstance(store.state.error, NotFoundError)


@pytest.mark.asyncio
async def test_add_file_to_active_project(store, persistence, file_service):
    project = await store.create_project("Docs")
    store.set_active_project(project.id)

    project_file = await store.add_file(PendingFile(name="guide.md", size=10, data=b"# Guide"))

    assert project_file.path == "/store/abc_guide.md"
    assert project_file.type == "text/markdown"
    assert store.active_project_files() == [project_file]
    persistence.create_project_file.assert_awaited_once_with(project_file)


@pytest.mark.asyncio
async def test_add_file_upload_failure(store, persistence, file_service):
    project = await store.create_project("Docs")
    file_service.upload_file.return_value = UploadResult(success=False, error="denied")

    assert await store.add_file(PendingFile(name="a.txt", data=b"a"), project.id) is None
    assert isinstance(store.state.error, PersistenceError)
    persistence.create_project_file.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_file_without_project(store):
    assert await store.add_file(PendingFile(name="a.txt", data=b"a")) is None
    assert isinstance(store.state.error, NotFoundError)


@pytest.mark.asyncio
async def test_rename_and_delete_file(store, persistence, file_service):
    project = await store.create_project("Docs")
    project_file = await store.add_file(PendingFile(name="a.txt", data=b"a"), project.id)

    renamed = await store.update_file(project_file.id, {"name": "b.txt", "path": "/etc/passwd"})
    assert renamed.name == "b.txt"
    assert renamed.path == project_file.path

    assert await store.delete_file(project_file.id)
    assert store.state.find_project(project.id).files == []
    file_service.delete_file.assert_awaited_once_with(project_file.path)


@pytest.mark.asyncio
async def test_delete_file_persistence_failure_keeps_blob(store, persistence, file_service):
    project = await store.create_project("Docs")
    project_file = await store.add_file(PendingFile(name="a.txt", data=b"a"), project.id)
    persistence.delete_project_file.side_effect = PersistenceError("locked")

    assert await store.delete_file(project_file.id) is False
    assert isinstance(store.state.error, PersistenceError)
    file_service.delete_file.assert_not_awaited()


@pytest.mark.asyncio
async def test_load_keeps_project_created_during_fetch(store, persistence):
    stored = Project.create("Stored")
    created = {}

    async def fetch_while_creating():
        created["project"] = await store.create_project("Draft")
        return [stored]

    persistence.get_projects.side_effect = fetch_while_creating

    projects = await store.load_projects()

    assert [p.id for p in projects] == [created["project"].id, stored.id]
    assert store.state.find_project(created["project"].id) is not None


@pytest.mark.asyncio
async def test_add_file_upload_exception_is_recorded(store, persistence, file_service):
    project = await store.create_project("Docs")
    file_service.upload_file.side_effect = PermissionError("denied")
    errors = []
    store.error_occurred.connect(errors.append)

    assert await store.add_file(PendingFile(name="a.txt", data=b"a"), project.id) is None
    assert isinstance(store.state.error, PersistenceError)
    assert "denied" in errors[0]
    assert store.state.find_project(project.id).files == []
    persistence.create_project_file.assert_not_awaited()
