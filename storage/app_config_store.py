"""Per-book ``config.json`` persistence."""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from config.exceptions import CorruptDocumentError
from models.app_config import DEFAULT_OLLAMA_OPTIONS, AppConfig
from models.schema import normalize_language_code
from storage import layout
from storage.fs import aexists, amake_dirs, aread_json, awrite_json

logger = logging.getLogger(__name__)


class AppConfigStore:
    """Loads and saves the model/language/AI settings kept next to each book."""

    async def language_hint(self, root: str | Path) -> str:
        """Marketplace language of the book, used as the default config language."""
        path = layout.book_file(root)
        if not await aexists(path):
            return AppConfig().language
        try:
            raw = await aread_json(path)
        except (OSError, CorruptDocumentError) as e:
            logger.debug("Ignoring unreadable %s for language hint: %s", path, e)
            return AppConfig().language

        amazon = raw.get("amazon") if isinstance(raw, dict) else None
        language = amazon.get("language") if isinstance(amazon, dict) else None
        if isinstance(language, str) and language.strip():
            return normalize_language_code(language)
        return AppConfig().language

    async def load_app_config(self, root: str | Path) -> AppConfig:
        """Load ``config.json`` merged over defaults.

        A missing file is created from defaults and a corrupt file is treated
        as missing. Fields with invalid values fall back to their defaults while
        the valid ones are kept.
        """
        await amake_dirs(root)
        hint = await self.language_hint(root)
        path = layout.config_file(root)

        raw: Any = None
        if await aexists(path):
            try:
                raw = await aread_json(path)
            except CorruptDocumentError as e:
                logger.warning("Replacing corrupt config %s with defaults: %s", path, e)

        if not isinstance(raw, dict):
            config = AppConfig(language=hint)
            await awrite_json(path, config.to_dict())
            return config

        data = dict(raw)
        language = data.get("language")
        data["language"] = (
            normalize_language_code(language)
            if isinstance(language, str) and language.strip()
            else hint
        )
        options = data.get("ollamaOptions")
        data["ollamaOptions"] = {
            **DEFAULT_OLLAMA_OPTIONS,
            **(options if isinstance(options, dict) else {}),
        }

        return self._validate_keeping_valid(data, path, hint)

    @staticmethod
    def _validate_keeping_valid(data: dict, path: Path, hint: str) -> AppConfig:
        """Validate ``data``, replacing each invalid field with its default."""
        while True:
            try:
                return AppConfig.model_validate(data)
            except ValidationError as e:
                invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
                invalid &= set(data)
                if not invalid:
                    logger.warning("Invalid config %s, using defaults: %s", path, e)
                    return AppConfig(language=hint)
                logger.warning(
                    "Invalid values in %s, using defaults for: %s", path, ", ".join(sorted(map(str, invalid)))
                )
                data = {k: v for k, v in data.items() if k not in invalid}
                data.setdefault("language", hint)

    async def save_app_config(self, root: str | Path, config: AppConfig) -> None:
        await amake_dirs(root)
        await awrite_json(layout.config_file(root), config.to_dict())
