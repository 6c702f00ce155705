"""Contracts for the asset services the editor talks to.

The search, generation and upload backends are opaque; this module only pins
down their request/response shapes and makes sure every raw reference they
return is canonicalized before the editor renders or compares it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence
from uuid import uuid4

from pydantic import BaseModel, Field
from werkzeug.utils import secure_filename

from .attachments import precheck_upload
from .models import NO_ASSET, CanonicalPath
from .paths import normalize, normalize_many

logger = logging.getLogger(__name__)


class SearchRequest(BaseModel):
    query: str
    limit: int = Field(default=40, ge=1)


class GenerateRequest(BaseModel):
    prompt: str


class UploadedAsset(BaseModel):
    id: str
    path: str = Field(description="Raw reference as returned by the service, canonical once normalized")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DeleteResult(BaseModel):
    ok: bool
    message: str


class UploadOutcome(BaseModel):
    asset: Optional[UploadedAsset] = None
    error: Optional[str] = None


class AssetSearchService(Protocol):
    def search(self, request: SearchRequest) -> Sequence[str]: ...


class AssetGenerationService(Protocol):
    def generate(self, request: GenerateRequest) -> str: ...


class UploadService(Protocol):
    def upload(self, file_bytes: bytes, mime_type: str, filename: str) -> UploadedAsset: ...

    def list_uploaded(self) -> Sequence[UploadedAsset]: ...

    def delete(self, asset_id: str) -> DeleteResult: ...


def _canonical_asset(asset: UploadedAsset) -> Optional[UploadedAsset]:
    path = normalize(asset.path).path
    if not path:
        return None
    return asset.model_copy(update={"path": path.path})


class AssetGateway:
    """Calls the asset collaborators and canonicalizes what they return.

    Collaborator failures are logged and reported as empty results; they never
    propagate into the editing surface.
    """

    def __init__(
        self,
        search: Optional[AssetSearchService] = None,
        generator: Optional[AssetGenerationService] = None,
        uploads: Optional[UploadService] = None,
        previous_generated: Optional[Callable[[], Sequence[UploadedAsset]]] = None,
    ) -> None:
        self._search = search
        self._generator = generator
        self._uploads = uploads
        self._previous_generated = previous_generated

    def search_assets(self, query: str, limit: int = 40) -> List[CanonicalPath]:
        if self._search is None:
            return []
        try:
            raws = self._search.search(SearchRequest(query=query, limit=limit))
        except Exception:
            logger.exception("Asset search failed for %r", query)
            return []
        return normalize_many(raws)[:limit]

    def generate_asset(self, prompt: str) -> CanonicalPath:
        if self._generator is None:
            return NO_ASSET
        try:
            raw = self._generator.generate(GenerateRequest(prompt=prompt))
        except Exception:
            logger.exception("Asset generation failed")
            return NO_ASSET
        return normalize(raw).path

    def upload_asset(self, file_bytes: bytes, mime_type: str, filename: str) -> UploadOutcome:
        rejection = precheck_upload(len(file_bytes), mime_type)
        if rejection is not None:
            return UploadOutcome(error=rejection.message)
        if self._uploads is None:
            return UploadOutcome(error="Uploads are not available.")
        try:
            asset = self._uploads.upload(file_bytes, mime_type, filename)
        except Exception:
            logger.exception("Upload of %s failed", filename)
            return UploadOutcome(error="Failed to upload image. Please try again.")
        canonical = _canonical_asset(asset)
        if canonical is None:
            return UploadOutcome(error="Upload did not return a usable path.")
        return UploadOutcome(asset=canonical)

    def list_uploaded(self) -> List[UploadedAsset]:
        if self._uploads is None:
            return []
        try:
            records = self._uploads.list_uploaded()
        except Exception:
            logger.exception("Listing uploaded assets failed")
            return []
        return [a for a in (_canonical_asset(r) for r in records) if a is not None]

    def list_previous_generated(self) -> List[UploadedAsset]:
        if self._previous_generated is None:
            return []
        try:
            records = self._previous_generated()
        except Exception:
            logger.exception("Listing previously generated assets failed")
            return []
        return [a for a in (_canonical_asset(r) for r in records) if a is not None]

    def delete_asset(self, asset_id: str) -> DeleteResult:
        if self._uploads is None:
            return DeleteResult(ok=False, message="Uploads are not available.")
        try:
            return self._uploads.delete(asset_id)
        except Exception as exc:
            logger.exception("Deleting asset %s failed", asset_id)
            return DeleteResult(ok=False, message=str(exc) or "Failed to delete image. Please try again.")


class LocalUploadStore:
    """Upload collaborator that keeps files in a directory on disk."""

    def __init__(self, root: str | Path, public_prefix: str = "app_data/images") -> None:
        self.root = Path(root)
        self.public_prefix = public_prefix.strip("/")

    def _ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def _record(self, path: Path) -> UploadedAsset:
        return UploadedAsset(
            id=path.name,
            path=f"{self.public_prefix}/{path.name}",
            metadata={"size": path.stat().st_size},
        )

    def upload(self, file_bytes: bytes, mime_type: str, filename: str) -> UploadedAsset:
        safe_name = secure_filename(filename or "") or "upload"
        dest = self._ensure_root() / f"{uuid4().hex[:8]}_{safe_name}"
        dest.write_bytes(file_bytes)
        logger.debug("Stored upload %s (%s, %d bytes)", dest, mime_type, len(file_bytes))
        return self._record(dest)

    def list_uploaded(self) -> List[UploadedAsset]:
        root = self._ensure_root()
        return [self._record(p) for p in sorted(root.iterdir()) if p.is_file()]

    def delete(self, asset_id: str) -> DeleteResult:
        safe_id = secure_filename(asset_id)
        target = self._ensure_root() / safe_id
        if not safe_id or not target.is_file():
            return DeleteResult(ok=False, message=f"Image '{asset_id}' not found")
        target.unlink()
        return DeleteResult(ok=True, message="Image deleted successfully")


__all__ = [
    "AssetGateway",
    "AssetGenerationService",
    "AssetSearchService",
    "DeleteResult",
    "GenerateRequest",
    "LocalUploadStore",
    "SearchRequest",
    "UploadOutcome",
    "UploadService",
    "UploadedAsset",
]
