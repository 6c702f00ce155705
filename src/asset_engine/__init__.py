from .errors import ErrorKind, InvalidFitModeError, ReorderInProgressError, UnknownItemError
from .models import (
    NO_ASSET,
    AdmissionResult,
    AssetReference,
    AttachmentFile,
    CanonicalPath,
    ClickEvent,
    ContainerRect,
    FitMode,
    FocusPoint,
    NormalizationOutcome,
    NormalizationResult,
    OrderableItem,
    PlacementState,
    UploadRejection,
    make_identity,
)
from .paths import normalize, normalize_many, normalize_path
from .placement import ClickRoute, PlacementMapper, state_from_properties, state_to_properties
from .reorder import GestureState, ReorderInteractionController, reorder_ids
from .attachments import AttachmentWorkingSet, admit, format_file_size, precheck_upload, remove, user_message
from .session import EditingSession, SessionRegistry

__all__ = [
    "ErrorKind",
    "InvalidFitModeError",
    "ReorderInProgressError",
    "UnknownItemError",
    "NO_ASSET",
    "AdmissionResult",
    "AssetReference",
    "AttachmentFile",
    "CanonicalPath",
    "ClickEvent",
    "ContainerRect",
    "FitMode",
    "FocusPoint",
    "NormalizationOutcome",
    "NormalizationResult",
    "OrderableItem",
    "PlacementState",
    "UploadRejection",
    "make_identity",
    "normalize",
    "normalize_many",
    "normalize_path",
    "ClickRoute",
    "PlacementMapper",
    "state_from_properties",
    "state_to_properties",
    "GestureState",
    "ReorderInteractionController",
    "reorder_ids",
    "AttachmentWorkingSet",
    "admit",
    "format_file_size",
    "precheck_upload",
    "remove",
    "user_message",
    "EditingSession",
    "SessionRegistry",
]
