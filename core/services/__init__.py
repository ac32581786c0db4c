"""Services for request assembly and export."""

from .chat_export_service import ChatExportService, ExportResult, export_artifact
from .request_assembler import RequestAssembler

__all__ = [
    "ChatExportService",
    "ExportResult",
    "RequestAssembler",
    "export_artifact",
]
