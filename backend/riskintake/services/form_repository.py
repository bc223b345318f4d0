"""
JSON file form repository.

Reads ``<forms_dir>/<form_id>.json`` documents, validates them through
the form definition engine and keeps parsed forms in a TTL cache.

Example:
    repository = JsonFormRepository(settings.forms_dir)
    form = await repository.load_form_definition("tracs_rif")
"""

import asyncio
import re
from pathlib import Path

from engines.form_definition import FormDefinition, FormDefinitionLoader
from riskintake.core.cache import TTLCache
from riskintake.core.exceptions import FormNotFoundError
from riskintake.core.logging import get_logger

logger = get_logger(__name__)

_FORM_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFormRepository:
    """
    Form store backed by a directory of JSON documents.

    Attributes:
        forms_dir: Directory holding ``<form_id>.json`` files.
    """

    def __init__(
        self,
        forms_dir: Path,
        cache: TTLCache[FormDefinition] | None = None,
        loader: FormDefinitionLoader | None = None,
    ) -> None:
        self.forms_dir = Path(forms_dir)
        self._cache = cache
        self._loader = loader or FormDefinitionLoader()

    def available_forms(self) -> list[str]:
        """Form ids present in the directory, sorted."""
        if not self.forms_dir.is_dir():
            return []
        return sorted(path.stem for path in self.forms_dir.glob("*.json"))

    async def load_form_definition(self, form_id: str) -> FormDefinition:
        """
        Load and validate a form.

        Raises:
            FormNotFoundError: No document exists for ``form_id``.
            FormDefinitionError: The document is not a valid form.
        """
        if self._cache is not None:
            cached = self._cache.get(form_id)
            if cached is not None:
                logger.debug(
                    f"Form '{form_id}' served from cache "
                    f"(hit ratio {self._cache.stats.hit_ratio:.0%})"
                )
                return cached

        if not _FORM_ID_PATTERN.match(form_id):
            raise FormNotFoundError(form_id, details="invalid form id")

        path = self.forms_dir / f"{form_id}.json"
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError as e:
            raise FormNotFoundError(form_id, details=str(path)) from e

        form = self._loader.load_json(raw)
        if form.id != form_id:
            logger.warning(f"Form file '{path.name}' declares id '{form.id}'")

        logger.info(
            f"Loaded form '{form_id}' v{form.version} ({len(form.sections)} sections)"
        )
        if self._cache is not None:
            self._cache.set(form_id, form)
        return form

    def invalidate(self, form_id: str) -> None:
        """Forget a cached form (e.g. after publishing a new version)."""
        if self._cache is not None and self._cache.invalidate(form_id):
            logger.info(f"Dropped cached form '{form_id}'")
