"""Wires the collaborators and state stores together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.config import get_data_dir
from core.infrastructure.keyring_service import KeyringService
from core.infrastructure.logging_config import configure_logging
from core.llm.transport import ChatTransport
from core.persistence import Database, LocalStore
from core.services.chat_export_service import ChatExportService
from ui.services.file_service import LocalFileService
from ui.viewmodels.chat.conversation_store import ConversationStore
from ui.viewmodels.project.project_store import ProjectStore
from ui.viewmodels.settings.model_settings import ModelSettings

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    database: Database
    persistence: LocalStore
    file_service: LocalFileService
    exporter: ChatExportService
    settings: ModelSettings
    transport: ChatTransport
    conversations: ConversationStore
    projects: ProjectStore

    def close(self) -> None:
        self.database.close()


def build_app_context(
    data_dir: Optional[Path] = None,
    keyring_service: Optional[KeyringService] = None,
    setup_logging: bool = True,
) -> AppContext:
    """Open the database under ``data_dir`` and build both stores."""
    data_dir = Path(data_dir) if data_dir else get_data_dir()
    if setup_logging:
        configure_logging(data_dir / "logs")

    database = Database(data_dir / "chatdesk.db")
    persistence = LocalStore(database)
    file_service = LocalFileService(data_dir / "files")
    exporter = ChatExportService(persistence)
    settings = ModelSettings(database=database, keyring_service=keyring_service)
    settings.load()
    transport = ChatTransport()

    context = AppContext(
        database=database,
        persistence=persistence,
        file_service=file_service,
        exporter=exporter,
        settings=settings,
        transport=transport,
        conversations=ConversationStore(
            persistence, file_service, exporter, transport, settings
        ),
        projects=ProjectStore(persistence, file_service),
    )
    logger.info("Application context ready at %s", data_dir)
    return context
