"""Tests for relation graph validators."""

from __future__ import annotations

import copy

from specbuild.graph import RelationGraphBuilder
from specbuild.models import ExtractedEntity
from specbuild.validators import (
    DuplicateIdValidator,
    ReferenceValidator,
    default_validators,
    run_validators,
)


def _graph():
    return RelationGraphBuilder().build(
        {
            "guards": [
                ExtractedEntity(
                    id="auth-guard",
                    folder="guards",
                    source_path="layers/guards/auth.toml",
                    relations={"roles": ["admin", "ghost"]},
                )
            ],
            "roles": [
                ExtractedEntity(id="admin", folder="roles", source_path="layers/roles/admin.toml"),
                ExtractedEntity(id="admin", folder="roles", source_path="layers/roles/admin-2.toml"),
            ],
        }
    )


def test_reference_validator_reports_each_missing_target() -> None:
    issues = ReferenceValidator().validate(_graph())

    assert len(issues) == 1
    issue = issues[0]
    assert issue.code == "dangling-reference"
    assert (issue.source_id, issue.kind, issue.target_id) == ("auth-guard", "roles", "ghost")
    assert issue.detail == 'auth-guard references unknown id "ghost" in roles'


def test_validators_do_not_mutate_graph() -> None:
    graph = _graph()
    snapshot = copy.deepcopy(graph)

    run_validators(graph, default_validators())

    assert graph == snapshot


def test_duplicate_id_validator_reports_collisions() -> None:
    issues = DuplicateIdValidator().validate(_graph())

    assert [issue.code for issue in issues] == ["duplicate-id"]
    assert "layers/roles/admin-2.toml" in issues[0].detail


def test_run_validators_concatenates_in_order() -> None:
    issues = run_validators(_graph(), default_validators())
    assert [issue.code for issue in issues] == ["dangling-reference", "duplicate-id"]


def test_clean_graph_has_no_issues() -> None:
    graph = RelationGraphBuilder().build(
        {"roles": [ExtractedEntity(id="admin", folder="roles", source_path="layers/roles/admin.toml")]}
    )
    assert run_validators(graph, default_validators()) == []
