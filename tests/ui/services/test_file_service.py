"""Tests for LocalFileService storage operations."""

from pathlib import Path

import pytest

from core.models import PendingFile
from ui.services.file_service import LocalFileService


@pytest.fixture
def service(tmp_path: Path):
    return LocalFileService(tmp_path / "files")


@pytest.mark.asyncio
async def test_upload_bytes(service):
    result = await service.upload_file(PendingFile(name="notes.txt", data=b"hello"))

    assert result.success
    stored = Path(result.path)
    assert stored.parent == service.storage_dir
    assert stored.name.endswith("_notes.txt")
    assert await service.download_file(result.path) == b"hello"


@pytest.mark.asyncio
async def test_upload_path_keeps_same_names_apart(service, tmp_path: Path):
    source = tmp_path / "report.csv"
    source.write_text("a,b\n", encoding="utf-8")

    first = await service.upload_file(str(source))
    second = await service.upload_file(str(source))

    assert first.success and second.success
    assert first.path != second.path


@pytest.mark.asyncio
async def test_upload_missing_source_fails(service, tmp_path: Path):
    result = await service.upload_file(str(tmp_path / "missing.txt"))
    assert not result.success
    assert result.error


@pytest.mark.asyncio
async def test_upload_without_data_fails(service):
    result = await service.upload_file(PendingFile(name="empty.bin"))
    assert not result.success


@pytest.mark.asyncio
async def test_delete_file(service):
    result = await service.upload_file(PendingFile(name="a.txt", data=b"a"))

    assert await service.delete_file(result.path)
    assert not Path(result.path).exists()
    assert await service.delete_file(result.path) is False


@pytest.mark.asyncio
async def test_delete_refuses_outside_storage(service, tmp_path: Path):
    outside = tmp_path / "keep.txt"
    outside.write_text("keep", encoding="utf-8")

    assert await service.delete_file(str(outside)) is False
    assert outside.exists()
