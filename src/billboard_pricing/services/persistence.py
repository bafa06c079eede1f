"""
Persistence collaborators for the pricing document.

The document is saved and loaded whole (full-document replace); the last
writer wins.
"""
import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Optional

from ..engine.errors import ExternalIOFailure

logger = logging.getLogger(__name__)


class PricingRepository:
    """Interface for durable storage of the pricing document."""

    async def load(self) -> Optional[dict]:
        """Return the stored document, or None when nothing is stored yet."""
        raise NotImplementedError

    async def save(self, document: dict) -> None:
        raise NotImplementedError


class InMemoryRepository(PricingRepository):
    """Keeps the document in memory. Used by tests and dry runs."""

    def __init__(self, document: Optional[dict] = None):
        self.document = copy.deepcopy(document) if document is not None else None
        self.save_count = 0

    async def load(self) -> Optional[dict]:
        return copy.deepcopy(self.document) if self.document is not None else None

    async def save(self, document: dict) -> None:
        self.document = copy.deepcopy(document)
        self.save_count += 1


class JsonFileRepository(PricingRepository):
    """Stores the document as a UTF-8 JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling file first so a failed write never truncates the document
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError):
            tmp_path.unlink(missing_ok=True)
            raise

    async def load(self) -> Optional[dict]:
        try:
            document = await asyncio.to_thread(self._read)
        except (OSError, json.JSONDecodeError) as exc:
            raise ExternalIOFailure(f"Failed to load pricing document {self.path}: {exc}") from exc
        if document is not None:
            logger.info("Loaded pricing document from %s", self.path)
        return document

    async def save(self, document: dict) -> None:
        try:
            await asyncio.to_thread(self._write, document)
        except (OSError, TypeError, ValueError) as exc:
            raise ExternalIOFailure(f"Failed to save pricing document {self.path}: {exc}") from exc
        logger.info("Saved pricing document to %s", self.path)
