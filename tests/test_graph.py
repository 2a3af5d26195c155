"""Tests for specbuild.graph."""

from __future__ import annotations

from specbuild.graph import RelationGraphBuilder
from specbuild.models import ExtractedEntity
from specbuild.reader import StructuredDocumentReader
from tests._fixtures.spec_builder import SpecBuilder


def _entity(entity_id: str, folder: str, relations=None, title=None) -> ExtractedEntity:
    return ExtractedEntity(
        id=entity_id,
        folder=folder,
        source_path=f"layers/{folder}/{entity_id}.toml",
        title=title,
        relations=relations,
    )


def test_roles_and_guards_graph(roles_and_guards: SpecBuilder) -> None:
    builder = RelationGraphBuilder()
    graph = builder.build(builder.collect(roles_and_guards.spec / "layers"))

    assert graph.by_folder == {"guards": ["auth-guard"], "roles": ["admin"]}
    assert graph.relations == {"auth-guard": {"roles": ["admin"]}}
    assert graph.referenced_by == {"admin": ["auth-guard"]}
    assert graph.by_id["admin"].to_dict() == {
        "path": "layers/roles/admin.toml",
        "folder": "roles",
        "title": "Administrator",
    }


def test_backlinks_are_deduplicated_across_kinds() -> None:
    graph = RelationGraphBuilder().build(
        {
            "guards": [_entity("a", "guards", {"roles": ["b"], "owners": ["b", "b"]})],
            "roles": [_entity("b", "roles")],
        }
    )

    assert graph.referenced_by["b"] == ["a"]
    assert graph.relations["a"] == {"roles": ["b"], "owners": ["b", "b"]}
    assert graph.relation_count() == 3
    assert graph.backlink_count() == 1


def test_backlinks_keep_first_seen_order() -> None:
    graph = RelationGraphBuilder().build(
        {
            "use-cases": [
                _entity("zeta", "use-cases", {"roles": ["admin"]}),
                _entity("alpha", "use-cases", {"roles": ["admin"]}),
            ],
            "roles": [_entity("admin", "roles", {"peers": ["zeta"]})],
        }
    )

    assert graph.referenced_by["admin"] == ["zeta", "alpha"]
    assert graph.referenced_by["zeta"] == ["admin"]


def test_every_forward_relation_has_a_backlink() -> None:
    graph = RelationGraphBuilder().build(
        {
            "a": [_entity("x", "a", {"k1": ["y", "z"]}), _entity("y", "a", {"k2": ["x"]})],
            "b": [_entity("z", "b", {"k3": ["x", "missing"]})],
        }
    )

    for source, kinds in graph.relations.items():
        for targets in kinds.values():
            for target in targets:
                assert source in graph.referenced_by[target]


def test_duplicate_ids_last_write_wins_and_are_recorded() -> None:
    first = _entity("shared", "roles", title="First")
    second = ExtractedEntity(
        id="shared", folder="guards", source_path="layers/guards/other.toml", title="Second"
    )

    graph = RelationGraphBuilder().build({"roles": [first], "guards": [second]})

    assert graph.by_id["shared"].title == "Second"
    assert graph.by_folder == {"roles": ["shared"], "guards": ["shared"]}
    assert len(graph.collisions) == 1
    collision = graph.collisions[0]
    assert collision.previous_path == "layers/roles/shared.toml"
    assert collision.path == "layers/guards/other.toml"


def test_collect_registers_empty_folders_and_skips_bad_files(spec_builder: SpecBuilder) -> None:
    spec_builder.write(
        {
            "layers/roles/admin.toml": "[role]\nid = 'admin'\n",
            "layers/roles/broken.toml": "[role\n",
            "layers/roles/nested/deep.toml": "[role]\nid = 'deep'\n",
            "layers/events/README.md": "# Events\n",
            "layers/about.toml": "id = 'not-a-folder'\n",
        }
    )
    reader = StructuredDocumentReader()
    builder = RelationGraphBuilder(reader)

    collected = builder.collect(spec_builder.spec / "layers")

    assert list(collected) == ["events", "roles"]
    assert collected["events"] == []
    assert [entity.id for entity in collected["roles"]] == ["admin"]
    assert len(reader.failures) == 1


def test_collect_missing_layers_directory_is_empty(spec_builder: SpecBuilder) -> None:
    assert RelationGraphBuilder().collect(spec_builder.spec / "layers") == {}


def test_graph_serialises_with_camel_case_keys(roles_and_guards: SpecBuilder) -> None:
    builder = RelationGraphBuilder()
    payload = builder.build(builder.collect(roles_and_guards.spec / "layers")).to_dict()

    assert list(payload) == ["byId", "byFolder", "referencedBy", "relations"]
