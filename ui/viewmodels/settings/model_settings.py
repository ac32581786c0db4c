"""ModelSettings - generation parameters and API key management."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
)
from core.infrastructure.keyring_service import KeyringService, get_keyring_service
from core.persistence import Database, SettingsRepository
from core.types import GenerationParams

logger = logging.getLogger(__name__)

AVAILABLE_MODELS = [
    "claude-3-7-sonnet-20250219",
    "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku-20241022",
    "claude-3-opus-20240229",
]

MAX_TOKENS_LIMIT = 64000


class ModelSettings(QObject):
    """Settings collaborator: model choice, sampling parameters and API key.

    The selected model is stored and shown, but the transport always sends
    the pinned model.
    """

    settings_changed = Signal()

    CATEGORY = "models"
    KEY_DEFAULT_MODEL = "models.default"
    KEY_MAX_TOKENS = "models.max_tokens"
    KEY_TEMPERATURE = "models.temperature"
    KEY_TOP_P = "models.top_p"
    KEY_API_KEY = "models.api_key"  # Fallback for non-keyring environments

    def __init__(
        self,
        database: Optional[Database] = None,
        keyring_service: Optional[KeyringService] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._db = database or Database()
        self._repo = SettingsRepository(self._db)
        self._keyring = keyring_service or get_keyring_service()

        self._api_key: str = ""
        self._model: str = DEFAULT_MODEL
        self._max_tokens: int = DEFAULT_MAX_TOKENS
        self._temperature: float = DEFAULT_TEMPERATURE
        self._top_p: float = DEFAULT_TOP_P

    @property
    def keyring_available(self) -> bool:
        return self._keyring.is_available

    @property
    def api_key(self) -> str:
        return self._api_key

    @api_key.setter
    def api_key(self, value: str) -> None:
        value = (value or "").strip()
        if self._api_key != value:
            self._api_key = value
            self.settings_changed.emit()

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    @property
    def model(self) -> str:
        return self._model

    @model.setter
    def model(self, value: str) -> None:
        if value and self._model != value:
            self._model = value
            self.settings_changed.emit()

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    @max_tokens.setter
    def max_tokens(self, value: int) -> None:
        value = max(1, min(int(value), MAX_TOKENS_LIMIT))
        if self._max_tokens != value:
            self._max_tokens = value
            self.settings_changed.emit()

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        value = max(0.0, min(float(value), 1.0))
        if self._temperature != value:
            self._temperature = value
            self.settings_changed.emit()

    @property
    def top_p(self) -> float:
        return self._top_p

    @top_p.setter
    def top_p(self, value: float) -> None:
        value = max(0.0, min(float(value), 1.0))
        if self._top_p != value:
            self._top_p = value
            self.settings_changed.emit()

    def generation_params(self) -> GenerationParams:
        return GenerationParams(
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            top_p=self._top_p,
            model=self._model,
        )

    def load(self) -> None:
        """Load model settings from database and keyring."""
        self._model = self._repo.get_value(self.KEY_DEFAULT_MODEL, DEFAULT_MODEL)
        self._max_tokens = self._repo.get_int(self.KEY_MAX_TOKENS, DEFAULT_MAX_TOKENS)
        self._temperature = self._repo.get_float(self.KEY_TEMPERATURE, DEFAULT_TEMPERATURE)
        self._top_p = self._repo.get_float(self.KEY_TOP_P, DEFAULT_TOP_P)

        self._api_key = self._keyring.get_credential("anthropic") or ""
        if not self._keyring.is_available and not self._api_key:
            self._api_key = self._repo.get_value(self.KEY_API_KEY, "")

    def save(self) -> None:
        """Save model settings to database and keyring."""
        if self._keyring.is_available:
            if self._api_key:
                self._keyring.store_credential("anthropic", self._api_key)
        else:
            logger.warning("Keyring unavailable, storing API key in the settings table")
            self._repo.set(self.KEY_API_KEY, self._api_key, self.CATEGORY)

        self._repo.set(self.KEY_DEFAULT_MODEL, self._model, self.CATEGORY)
        self._repo.set(self.KEY_MAX_TOKENS, str(self._max_tokens), self.CATEGORY)
        self._repo.set(self.KEY_TEMPERATURE, str(self._temperature), self.CATEGORY)
        self._repo.set(self.KEY_TOP_P, str(self._top_p), self.CATEGORY)
