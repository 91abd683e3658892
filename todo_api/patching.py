"""JSON Patch support for task items.

A patch document is a JSON array of ``{"op", "path", "value"}`` objects
(RFC 6902 shape). Only a closed set of task fields can be patched and each
one has its own setter, so a document never reaches attributes such as
``id``.

Path convention: a path is a single segment pointer ``/<Field>``. The
segment is matched case-insensitively against the JSON field names, so
``/Status``, ``/status`` and ``/STATUS`` all address ``status``. The
snake_case attribute name (``/assigned_user``) is accepted as well.

Supported operations are ``add``, ``replace`` and ``remove``. Every field of
a task always exists, so ``add`` behaves like ``replace``. ``remove`` clears
an optional field and is refused for ``title`` and ``createdDate``.

Documents are resolved in full before anything is assigned: one bad
operation rejects the whole document and leaves the task untouched.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple

from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import InvalidPatchDocument
from .timeutils import ensure_utc

SUPPORTED_OPS = ("add", "replace", "remove")


class PatchOperation(BaseModel):
    op: str
    path: str
    value: Any = None

    @property
    def has_value(self) -> bool:
        # an explicit JSON null still counts as a value
        return "value" in self.model_fields_set


_document_adapter = TypeAdapter(List[PatchOperation])
_datetime_adapter = TypeAdapter(datetime)


def _required_text(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidPatchDocument("value must be a string")
    return value


def _optional_text(value: Any):
    if value is not None and not isinstance(value, str):
        raise InvalidPatchDocument("value must be a string or null")
    return value


def _timestamp(value: Any) -> datetime:
    if value is None:
        raise InvalidPatchDocument("value must be a date-time")
    try:
        return ensure_utc(_datetime_adapter.validate_python(value))
    except ValidationError:
        raise InvalidPatchDocument(f"'{value}' is not a valid date-time")


@dataclass(frozen=True)
class PatchableField:
    attribute: str
    wire_name: str
    setter: Callable[[Any], Any]
    removable: bool


PATCHABLE_FIELDS = (
    PatchableField("title", "title", _required_text, removable=False),
    PatchableField("description", "description", _optional_text, removable=True),
    PatchableField("status", "status", _optional_text, removable=True),
    PatchableField("assigned_user", "assignedUser", _optional_text, removable=True),
    PatchableField("created_date", "createdDate", _timestamp, removable=False),
)

_FIELDS_BY_KEY: Dict[str, PatchableField] = {}
for _field in PATCHABLE_FIELDS:
    _FIELDS_BY_KEY[_field.wire_name.lower()] = _field
    _FIELDS_BY_KEY[_field.attribute.lower()] = _field


def parse_patch_document(document: Any) -> List[PatchOperation]:
    """Validate the raw request body into a list of operations"""
    if document is None:
        raise InvalidPatchDocument("A patch document is required")
    if not isinstance(document, list):
        raise InvalidPatchDocument("A patch document must be a JSON array of operations")
    try:
        return _document_adapter.validate_python(document)
    except ValidationError as e:
        raise InvalidPatchDocument(f"Malformed patch operation: {e.errors()[0]['msg']}")


def resolve_field(path: str) -> PatchableField:
    """Map a ``/Field`` pointer onto a patchable field"""
    if not path.startswith("/") or "/" in path[1:]:
        raise InvalidPatchDocument(f"Unsupported path '{path}'")
    field = _FIELDS_BY_KEY.get(path[1:].lower())
    if field is None:
        raise InvalidPatchDocument(f"The target location '{path}' does not exist on a task item")
    return field


def resolve_operation(operation: PatchOperation) -> Tuple[str, Any]:
    """Return the (attribute, new value) pair an operation stands for"""
    op = operation.op.lower()
    if op not in SUPPORTED_OPS:
        raise InvalidPatchDocument(f"Unsupported patch operation '{operation.op}'")

    field = resolve_field(operation.path)

    if op == "remove":
        if not field.removable:
            raise InvalidPatchDocument(f"'{field.wire_name}' cannot be removed")
        return field.attribute, None

    if not operation.has_value:
        raise InvalidPatchDocument(f"'{op}' on '{operation.path}' requires a value")
    return field.attribute, field.setter(operation.value)


def apply_patch(target: Any, operations: List[PatchOperation]) -> Any:
    """Apply operations in order, all or nothing"""
    changes = [resolve_operation(operation) for operation in operations]
    for attribute, value in changes:
        setattr(target, attribute, value)
    return target
