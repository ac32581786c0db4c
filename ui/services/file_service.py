"""Local file storage for attachments and project files."""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union
from uuid import uuid4

from PySide6.QtWidgets import QFileDialog, QWidget

from core.models import PendingFile

logger = logging.getLogger(__name__)

DEFAULT_OPEN_FILTER = "All Files (*)"


@dataclass(frozen=True)
class UploadResult:
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None


class LocalFileService:
    """File collaborator that copies uploads into a private storage directory.

    Stored files get a unique prefix so two uploads with the same name never
    collide. Disk work runs in a worker thread; dialogs run on the GUI thread.
    """

    def __init__(self, storage_dir: Path, parent_widget: Optional[QWidget] = None):
        self._storage_dir = Path(storage_dir)
        self._parent_widget = parent_widget

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    async def upload_file(self, source: Union[PendingFile, str]) -> UploadResult:
        """Copy a local path or the bytes of a PendingFile into storage."""
        try:
            path = await asyncio.to_thread(self._store, source)
        except (OSError, ValueError) as e:
            logger.error("Failed to upload file: %s", e)
            return UploadResult(success=False, error=str(e))
        logger.info("Stored upload at: %s", path)
        return UploadResult(success=True, path=str(path))

    def _store(self, source: Union[PendingFile, str]) -> Path:
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        if isinstance(source, str):
            source_path = Path(source)
            destination = self._destination_for(source_path.name)
            shutil.copyfile(source_path, destination)
            return destination

        destination = self._destination_for(source.name)
        if source.data is not None:
            destination.write_bytes(source.data)
        elif source.source_path:
            shutil.copyfile(source.source_path, destination)
        else:
            raise ValueError(f"No data for file {source.name}")
        return destination

    def _destination_for(self, name: str) -> Path:
        safe_name = Path(name).name or "file"
        return self._storage_dir / f"{uuid4().hex[:12]}_{safe_name}"

    async def download_file(self, path: str) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def delete_file(self, path: str) -> bool:
        target = Path(path)
        if self._storage_dir.resolve() not in target.resolve().parents:
            logger.warning("Refusing to delete file outside storage: %s", path)
            return False
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, e)
            return False
        return True

    async def open_file_dialog(
        self, multiple: bool = True, file_filter: str = DEFAULT_OPEN_FILTER
    ) -> list[str]:
        if multiple:
            paths, _ = QFileDialog.getOpenFileNames(
                self._parent_widget, "Select files", "", file_filter
            )
            return list(paths)
        path, _ = QFileDialog.getOpenFileName(
            self._parent_widget, "Select file", "", file_filter
        )
        return [path] if path else []

    async def save_file_dialog(
        self, default_name: str, filters: Optional[Sequence[str]] = None
    ) -> Optional[str]:
        path, _ = QFileDialog.getSaveFileName(
            self._parent_widget,
            "Save as",
            default_name,
            ";;".join(filters) if filters else DEFAULT_OPEN_FILTER,
        )
        return path or None
