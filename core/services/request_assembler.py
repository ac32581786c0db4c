"""Builds provider turns from user text, attachments, project files and history."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence, Union

from pydantic import TypeAdapter

from core.constants import (
    ATTACHMENT_BINARY_TEMPLATE,
    ATTACHMENT_TEXT_TEMPLATE,
    DEFAULT_GREETING,
    PROJECT_FILE_BINARY_TEMPLATE,
    PROJECT_FILE_TEXT_TEMPLATE,
    PROJECT_FOOTER,
    PROJECT_HEADER_TEMPLATE,
)
from core.errors import AttachmentReadError
from core.models import Message
from core.types import ContentBlock, ImageBlock, ImageSource, TextBlock, Turn
from core.utils.media import classify_media_type, is_image

logger = logging.getLogger(__name__)

_BLOCK_LIST = TypeAdapter(list[ContentBlock])


class FileRef(Protocol):
    """Anything with a name, a stored path and a declared type."""

    name: str
    path: str
    type: str


HistoryEntry = Union[Message, Mapping[str, Any]]


class RequestAssembler:
    """
    Turns one user send into the ordered list of turns for the provider.

    Attachment problems never raise: unreadable files are skipped and
    undecodable files are described by a placeholder block.
    """

    def assemble(
        self,
        text: str,
        attachments: Sequence[FileRef] = (),
        project_files: Sequence[FileRef] = (),
        history: Sequence[HistoryEntry] = (),
    ) -> list[Turn]:
        blocks: list[ContentBlock] = []

        for attachment in attachments:
            block = self._file_block(
                attachment, ATTACHMENT_TEXT_TEMPLATE, ATTACHMENT_BINARY_TEMPLATE
            )
            if block is not None:
                blocks.append(block)

        if project_files:
            blocks.append(TextBlock(text=PROJECT_HEADER_TEMPLATE.format(count=len(project_files))))
            for project_file in project_files:
                block = self._file_block(
                    project_file, PROJECT_FILE_TEXT_TEMPLATE, PROJECT_FILE_BINARY_TEMPLATE
                )
                if block is not None:
                    blocks.append(block)
            blocks.append(TextBlock(text=PROJECT_FOOTER))

        blocks.append(TextBlock(text=text or DEFAULT_GREETING))

        turns = self.normalize_history(history)
        turns.append(Turn(role="user", content=blocks))
        return turns

    def normalize_history(self, history: Sequence[HistoryEntry]) -> list[Turn]:
        """Convert prior messages to turns, skipping entries without a role."""
        turns: list[Turn] = []
        for entry in history:
            if isinstance(entry, Message):
                role, content = entry.role.value, entry.content
            else:
                role, content = entry.get("role"), entry.get("content")
            if not role:
                continue
            role = getattr(role, "value", role)
            if isinstance(content, str):
                blocks = [TextBlock(text=content)] if content else []
            elif content is None:
                blocks = []
            else:
                blocks = _BLOCK_LIST.validate_python(content)
            turns.append(Turn(role=role, content=blocks))
        return turns

    def _file_block(
        self, file_ref: FileRef, text_template: str, binary_template: str
    ) -> Optional[ContentBlock]:
        try:
            data = self._read(file_ref)
        except AttachmentReadError as e:
            logger.warning("%s", e)
            return None

        media_type = classify_media_type(file_ref.type, file_ref.name)
        if is_image(media_type):
            return ImageBlock(
                source=ImageSource(
                    media_type=media_type,
                    data=base64.b64encode(data).decode("ascii"),
                )
            )

        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.info("Attachment %s is not UTF-8 text, sending placeholder", file_ref.name)
            return TextBlock(
                text=binary_template.format(name=file_ref.name, type=media_type, size=len(data))
            )
        return TextBlock(text=text_template.format(name=file_ref.name, text=content))

    @staticmethod
    def _read(file_ref: FileRef) -> bytes:
        if not file_ref.path:
            raise AttachmentReadError(file_ref.name, "no stored path")
        try:
            return Path(file_ref.path).read_bytes()
        except OSError as e:
            raise AttachmentReadError(file_ref.name, str(e)) from e
