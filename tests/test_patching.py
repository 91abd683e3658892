from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from todo_api.exceptions import InvalidPatchDocument
from todo_api.patching import apply_patch, parse_patch_document, resolve_field


def make_target():
    return SimpleNamespace(
        id=1,
        title="Task",
        description="Desc",
        status="ToDo",
        assigned_user="John Doe",
        created_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize("path", ["/Status", "/status", "/STATUS"])
def test_paths_match_case_insensitively(path):
    assert resolve_field(path).attribute == "status"


@pytest.mark.parametrize("path", ["/assignedUser", "/AssignedUser", "/assigned_user"])
def test_assigned_user_paths(path):
    assert resolve_field(path).attribute == "assigned_user"


@pytest.mark.parametrize("path", ["Status", "/", "/Id", "/Status/0", "/Priority"])
def test_unsupported_paths_are_rejected(path):
    with pytest.raises(InvalidPatchDocument):
        resolve_field(path)


def test_replace_status():
    target = make_target()

    apply_patch(target, parse_patch_document([{"op": "replace", "path": "/Status", "value": "Done"}]))

    assert target.status == "Done"
    assert target.title == "Task"
    assert target.assigned_user == "John Doe"


def test_add_behaves_like_replace():
    target = make_target()

    apply_patch(target, parse_patch_document([{"op": "add", "path": "/Title", "value": "Renamed"}]))

    assert target.title == "Renamed"


def test_remove_clears_optional_field():
    target = make_target()

    apply_patch(target, parse_patch_document([{"op": "remove", "path": "/Description"}]))

    assert target.description is None


@pytest.mark.parametrize("path", ["/Title", "/CreatedDate"])
def test_required_fields_cannot_be_removed(path):
    with pytest.raises(InvalidPatchDocument):
        apply_patch(make_target(), parse_patch_document([{"op": "remove", "path": path}]))


def test_created_date_is_parsed_and_stored_as_utc():
    target = make_target()

    apply_patch(target, parse_patch_document([
        {"op": "replace", "path": "/createdDate", "value": "2025-06-01T12:00:00+02:00"}
    ]))

    assert target.created_date == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
    assert target.created_date.utcoffset().total_seconds() == 0


@pytest.mark.parametrize("operation", [
    {"op": "move", "from": "/Title", "path": "/Description"},
    {"op": "test", "path": "/Status", "value": "ToDo"},
    {"op": "replace", "path": "/Status"},
    {"op": "replace", "path": "/Status", "value": 3},
    {"op": "replace", "path": "/Title", "value": None},
    {"op": "replace", "path": "/createdDate", "value": "yesterday"},
])
def test_invalid_operations_are_rejected(operation):
    with pytest.raises(InvalidPatchDocument):
        apply_patch(make_target(), parse_patch_document([operation]))


def test_rejected_document_changes_nothing():
    target = make_target()
    operations = parse_patch_document([
        {"op": "replace", "path": "/Status", "value": "Done"},
        {"op": "replace", "path": "/Nope", "value": "x"},
    ])

    with pytest.raises(InvalidPatchDocument):
        apply_patch(target, operations)

    assert target.status == "ToDo"


def test_explicit_null_counts_as_value():
    target = make_target()

    apply_patch(target, parse_patch_document([{"op": "replace", "path": "/assignedUser", "value": None}]))

    assert target.assigned_user is None


@pytest.mark.parametrize("document", [
    None,
    {"op": "replace", "path": "/Status", "value": "Done"},
    "replace",
    [{"path": "/Status", "value": "Done"}],
    [{"op": "replace"}],
    [42],
])
def test_malformed_documents(document):
    with pytest.raises(InvalidPatchDocument):
        parse_patch_document(document)


def test_empty_document_is_a_no_op():
    target = make_target()

    apply_patch(target, parse_patch_document([]))

    assert target.status == "ToDo"
