"""Canonicalization of asset references.

Raw references arrive from user pastes, service responses and upload echoes in
several shapes: absolute URLs (``https://host/app_data/images/a.png?x=1``),
rooted paths (``/app_data/images/a.png``) and bare relative paths
(``images/a.png``). Everything rendered or compared in the editor goes through
:func:`normalize` first so that the three shapes collapse to one
:class:`CanonicalPath`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from .errors import ErrorKind
from .models import NO_ASSET, CanonicalPath, NormalizationOutcome, NormalizationResult

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
_LEADING_SEPARATORS_RE = re.compile(r"^/+")


def _as_rooted(path: str) -> str:
    # a single leading "/" keeps "//host/x" from reading as a network-path reference
    return "/" + _LEADING_SEPARATORS_RE.sub("", path)


def _url_path(raw: str) -> str:
    parts = urlsplit(raw)
    # raises ValueError for a non-numeric or out-of-range port
    _ = parts.port
    return parts.path


def normalize(raw: Optional[str]) -> NormalizationResult:
    if raw is None:
        return NormalizationResult(raw=None, path=NO_ASSET, outcome=NormalizationOutcome.NO_ASSET)
    candidate = raw.strip()
    if not candidate:
        return NormalizationResult(raw=raw, path=NO_ASSET, outcome=NormalizationOutcome.NO_ASSET)

    if _SCHEME_RE.match(candidate):
        try:
            url_path = _url_path(candidate)
        except ValueError as exc:
            logger.warning(
                "%s: invalid URL %r (%s); treating it as a path",
                ErrorKind.NORMALIZATION_FALLBACK.value,
                candidate,
                exc,
            )
            return NormalizationResult(
                raw=raw,
                path=CanonicalPath(_as_rooted(candidate)),
                outcome=NormalizationOutcome.FALLBACK_USED,
            )
        return NormalizationResult(
            raw=raw,
            path=CanonicalPath(_as_rooted(url_path)),
            outcome=NormalizationOutcome.PARSED,
        )

    return NormalizationResult(
        raw=raw,
        path=CanonicalPath(_as_rooted(candidate)),
        outcome=NormalizationOutcome.PATH,
    )


def normalize_path(raw: Optional[str]) -> CanonicalPath:
    return normalize(raw).path


def normalize_many(raws: Iterable[Optional[str]]) -> List[CanonicalPath]:
    """Normalize a collaborator listing, keeping order and dropping empty entries."""
    paths: List[CanonicalPath] = []
    for raw in raws:
        path = normalize(raw).path
        if path:
            paths.append(path)
    return paths


__all__ = ["normalize", "normalize_path", "normalize_many"]
