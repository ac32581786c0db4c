"""Chat export service.

Writes a whole conversation to disk as Markdown, JSON or plain text, and
saves single artifacts as standalone files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from core.models import Artifact, Chat, Message, MessageRole
from core.utils.artifacts import artifact_filename, extract_artifacts, message_artifacts

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("markdown", "json", "txt")
FORMAT_EXTENSIONS = {"markdown": "md", "json": "json", "txt": "txt"}


@dataclass
class ExportResult:
    success: bool
    path: Optional[str] = None
    error: Optional[str] = None


class ChatExportService:
    """Export collaborator backed by the persistence collaborator.

    Options:
    - destination: file path to write (required)
    - include_artifacts: append artifacts of assistant messages (default True)
    """

    def __init__(self, persistence):
        self._persistence = persistence

    async def export_chat(
        self,
        chat_id: str,
        format: str = "markdown",
        options: Optional[dict[str, Any]] = None,
    ) -> ExportResult:
        options = options or {}
        if format not in EXPORT_FORMATS:
            return ExportResult(success=False, error=f"Unsupported export format: {format}")

        destination = options.get("destination")
        if not destination:
            return ExportResult(success=False, error="No export destination given")

        chat = await self._persistence.get_chat(chat_id)
        if chat is None:
            return ExportResult(success=False, error=f"Chat not found: {chat_id}")
        messages = await self._persistence.get_messages_by_chat(chat_id)

        include_artifacts = options.get("include_artifacts", True)
        if format == "markdown":
            text = self._format_markdown(chat, messages, include_artifacts)
        elif format == "json":
            text = self._format_json(chat, messages, include_artifacts)
        else:
            text = self._format_text(chat, messages, include_artifacts)

        path = Path(destination)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to export chat %s: %s", chat_id, e)
            return ExportResult(success=False, error=str(e))

        logger.info("Exported chat %s to: %s", chat_id, path)
        return ExportResult(success=True, path=str(path))

    def default_filename(self, chat: Optional[Chat], format: str = "markdown") -> str:
        """Suggested file name for the save dialog."""
        stem = _sanitize_filename(chat.title) if chat else "chat-export"
        return f"{stem}.{FORMAT_EXTENSIONS.get(format, 'txt')}"

    def _display_text(self, message: Message) -> str:
        if message.role == MessageRole.ASSISTANT:
            return extract_artifacts(message.content).clean_text
        return message.content

    def _format_markdown(self, chat: Chat, messages: list[Message], include_artifacts: bool) -> str:
        lines = [f"# {chat.title}", "", f"_Created {chat.created_at:%Y-%m-%d %H:%M}_", ""]
        for message in messages:
            speaker = "User" if message.role == MessageRole.USER else "Assistant"
            lines.append(f"## {speaker} ({message.timestamp:%Y-%m-%d %H:%M})")
            lines.append("")
            lines.append(self._display_text(message))
            for attachment in message.attachments:
                lines.append(f"- Attachment: {attachment.name}")
            if include_artifacts and message.role == MessageRole.ASSISTANT:
                for artifact in message_artifacts(message):
                    lines.append("")
                    lines.append(f"### {artifact.title}")
                    lines.append("")
                    lines.append(f"```{artifact.language or ''}")
                    lines.append(artifact.content)
                    lines.append("```")
            lines.append("")
        return "\n".join(lines)

    def _format_json(self, chat: Chat, messages: list[Message], include_artifacts: bool) -> str:
        payload = {
            "id": chat.id,
            "title": chat.title,
            "created_at": chat.created_at.isoformat(),
            "updated_at": chat.updated_at.isoformat(),
            "messages": [],
        }
        for message in messages:
            entry: dict[str, Any] = {
                "id": message.id,
                "role": message.role.value,
                "content": message.content,
                "timestamp": message.timestamp.isoformat(),
                "attachments": [attachment.name for attachment in message.attachments],
            }
            if include_artifacts and message.role == MessageRole.ASSISTANT:
                entry["artifacts"] = [a.to_dict() for a in message_artifacts(message)]
            payload["messages"].append(entry)
        return json.dumps(payload, ensure_ascii=False, indent=2)

    def _format_text(self, chat: Chat, messages: list[Message], include_artifacts: bool) -> str:
        blocks = [chat.title, "=" * len(chat.title)]
        for message in messages:
            speaker = "User" if message.role == MessageRole.USER else "Assistant"
            block = f"[{message.timestamp:%Y-%m-%d %H:%M}] {speaker}:\n{self._display_text(message)}"
            if include_artifacts and message.role == MessageRole.ASSISTANT:
                for artifact in message_artifacts(message):
                    block += f"\n\n--- {artifact.title} ---\n{artifact.content}\n---"
            blocks.append(block)
        return "\n\n".join(blocks) + "\n"


def export_artifact(artifact: Artifact, directory: Path) -> Path:
    """Write one artifact into ``directory`` without overwriting existing files."""
    directory.mkdir(parents=True, exist_ok=True)
    filename = artifact_filename(artifact)
    stem, _, extension = filename.rpartition(".")
    candidate = directory / filename
    counter = 2
    while candidate.exists():
        candidate = directory / f"{stem}-{counter}.{extension}"
        counter += 1
    candidate.write_text(artifact.content, encoding="utf-8")
    logger.info("Exported artifact to: %s", candidate)
    return candidate


def _sanitize_filename(name: str) -> str:
    """Sanitize a string for use as a filename."""
    safe = name.replace("/", "-").replace("\\", "-")
    safe = "".join(c for c in safe if c.isalnum() or c in (" ", "-", "_", "."))
    return safe.strip()[:50] or "chat-export"
