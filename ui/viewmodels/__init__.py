"""ViewModels package for the ChatDesk UI."""

from ui.viewmodels.chat import ConversationStore
from ui.viewmodels.project import ProjectStore
from ui.viewmodels.settings import ModelSettings

__all__ = [
    "ConversationStore",
    "ProjectStore",
    "ModelSettings",
]
