"""
Versioned prompt store.

A prompt is a mutable header row in `prompt_master` that points at one
immutable row in `prompt_versions` (its active version). Creating a prompt or
a new version touches both tables without a database transaction, so both
flows run as sagas with compensating deletes.
"""
import logging
from typing import Any, Dict, List, Optional

from prompthub.core.errors import NotFound, PromptHubError, StoreConflict, ValidationError
from prompthub.models.prompt import utcnow
from prompthub.services.prompt_ids import derive_prompt_id, next_version_number
from prompthub.services.saga import Saga

logger = logging.getLogger(__name__)

PROMPTS = "prompt_master"
VERSIONS = "prompt_versions"

VERSION_FIELDS = ("version_id", "version_number", "prompt_text", "metadata", "created_by", "is_published")


def _require(value, field):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field)
    return value


def joined_view(header: Dict[str, Any], version: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Prompt header flattened with the fields of its active version (or None)."""
    view = dict(header)
    for field in VERSION_FIELDS:
        view[field] = version.get(field) if version else None
    view["version_created_at"] = version.get("created_at") if version else None
    return view


class VersionStore:
    def __init__(self, store, version_allocation_retries: int = 3, clock=None, id_factory=None):
        self.store = store
        self.version_allocation_retries = version_allocation_retries
        self.clock = clock or utcnow
        self.id_factory = id_factory or derive_prompt_id

    # --- writes ---

    def create_prompt(
        self,
        title: str,
        content: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        created_by: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Creates the header and version #1, then points the header at it.

        Returns {"prompt": ..., "source": "read_back" | "local"}. The prompt is
        read back from the store when possible; if that read fails the locally
        assembled records are returned instead.
        """
        _require(title, "title")
        _require(content, "content")

        prompt_id = self.id_factory(title)
        created_at = self.clock()
        header = {
            "prompt_id": prompt_id,
            "title": title,
            "description": description or None,
            "category": category,
            "parent_id": None,
            "active_version_id": None,
            "is_active": True,
            "created_at": created_at,
            "updated_at": created_at,
        }
        version = {
            "prompt_id": prompt_id,
            "version_number": 1,
            "prompt_text": content,
            "metadata": metadata or {},
            "created_by": created_by or "system",
            "is_published": True,
        }

        logger.info("Creating prompt %s", prompt_id)
        saga = (
            Saga("create_prompt")
            .step(
                "header",
                lambda ctx: self.store.insert(PROMPTS, header),
                lambda ctx: self.store.delete(PROMPTS, {"prompt_id": prompt_id}),
            )
            .step(
                "version",
                lambda ctx: self.store.insert(VERSIONS, version),
                lambda ctx: self.store.delete(VERSIONS, {"version_id": ctx["version"]["version_id"]}),
            )
            .step(
                "activate",
                lambda ctx: self._point_header(prompt_id, ctx["version"]["version_id"], created_at),
            )
        )
        ctx = saga.run()

        try:
            return {"prompt": self.get_prompt(prompt_id), "source": "read_back"}
        except PromptHubError as e:
            logger.warning("Read-back of prompt %s failed, returning local data: %s", prompt_id, e)
            local = {
                **ctx["header"],
                "active_version_id": ctx["version"]["version_id"],
                "prompt_versions": [ctx["version"]],
            }
            return {"prompt": local, "source": "local"}

    def create_version(
        self,
        prompt_id: str,
        prompt_text: str,
        created_by: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Appends version max+1 and makes it the active version."""
        _require(prompt_id, "prompt_id")
        _require(prompt_text, "prompt_text")
        self._get_header(prompt_id)

        saga = (
            Saga("create_version")
            .step(
                "version",
                lambda ctx: self._insert_next_version(prompt_id, prompt_text, created_by, metadata),
                lambda ctx: self.store.delete(VERSIONS, {"version_id": ctx["version"]["version_id"]}),
            )
            .step(
                "activate",
                lambda ctx: self._point_header(prompt_id, ctx["version"]["version_id"], self.clock()),
            )
        )
        ctx = saga.run()

        logger.info("Prompt %s now at version %s", prompt_id, ctx["version"]["version_number"])
        return joined_view(ctx["activate"], ctx["version"])

    def set_active_version(self, prompt_id: str, version_id: str) -> Dict[str, Any]:
        """Re-points the header at an existing version of the same prompt."""
        _require(prompt_id, "prompt_id")
        _require(version_id, "version_id")

        owned = self.store.select(VERSIONS, {"version_id": version_id, "prompt_id": prompt_id})
        if not owned:
            raise NotFound(f"Version {version_id} not found for prompt {prompt_id}")
        return self._point_header(prompt_id, version_id, self.clock())

    def archive_prompt(self, prompt_id: str) -> Dict[str, Any]:
        """Soft delete: hides the prompt from list_prompts."""
        _require(prompt_id, "prompt_id")
        rows = self.store.update(PROMPTS, {"prompt_id": prompt_id}, {"is_active": False, "updated_at": self.clock()})
        if not rows:
            raise NotFound(f"Prompt {prompt_id} not found")
        return rows[0]

    # --- reads ---

    def list_prompts(self) -> List[Dict[str, Any]]:
        headers = self.store.select(PROMPTS, {"is_active": True}, order_by="created_at", descending=True)

        active_ids = [h["active_version_id"] for h in headers if h["active_version_id"] is not None]
        versions = {}
        if active_ids:
            versions = {v["version_id"]: v for v in self.store.select(VERSIONS, {"version_id": active_ids})}

        return [joined_view(h, versions.get(h["active_version_id"])) for h in headers]

    def list_versions(self, prompt_id: str) -> List[Dict[str, Any]]:
        _require(prompt_id, "prompt_id")
        return self.store.select(VERSIONS, {"prompt_id": prompt_id}, order_by="version_number", descending=True)

    def get_prompt(self, prompt_id: str) -> Dict[str, Any]:
        header = self._get_header(prompt_id)
        return {**header, "prompt_versions": self.list_versions(prompt_id)}

    # --- internals ---

    def _get_header(self, prompt_id):
        rows = self.store.select(PROMPTS, {"prompt_id": prompt_id})
        if not rows:
            raise NotFound(f"Prompt {prompt_id} not found")
        return rows[0]

    def _point_header(self, prompt_id, version_id, updated_at):
        rows = self.store.update(
            PROMPTS,
            {"prompt_id": prompt_id},
            {"active_version_id": version_id, "updated_at": updated_at},
        )
        if not rows:
            raise NotFound(f"Prompt {prompt_id} not found")
        return rows[0]

    def _insert_next_version(self, prompt_id, prompt_text, created_by, metadata):
        # Two writers can read the same max; the unique constraint rejects the loser
        for attempt in range(1, self.version_allocation_retries + 1):
            number = next_version_number(self.store, prompt_id)
            try:
                return self.store.insert(
                    VERSIONS,
                    {
                        "prompt_id": prompt_id,
                        "version_number": number,
                        "prompt_text": prompt_text,
                        "metadata": metadata or {},
                        "created_by": created_by or "system",
                        "is_published": True,
                    },
                )
            except StoreConflict:
                logger.warning(
                    "Version %s of %s already taken (attempt %d/%d)",
                    number, prompt_id, attempt, self.version_allocation_retries,
                )
        raise StoreConflict(
            f"Could not allocate a version number for {prompt_id} "
            f"after {self.version_allocation_retries} attempts"
        )
