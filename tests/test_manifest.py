"""Tests for specbuild.manifest."""

from __future__ import annotations

from specbuild.graph import RelationGraphBuilder
from specbuild.manifest import LAYER_FOLDERS, ManifestCompiler, extract_heading
from specbuild.models import Manifest
from tests._fixtures.spec_builder import SpecBuilder


def _compile(builder: SpecBuilder) -> Manifest:
    graph_builder = RelationGraphBuilder()
    graph = graph_builder.build(graph_builder.collect(builder.spec / "layers"))
    return ManifestCompiler(builder.spec).compile(graph)


def test_role_wrapper_is_unwrapped(spec_builder: SpecBuilder) -> None:
    spec_builder.write({"layers/roles/admin.toml": "[role]\nid = 'r1'\nname = 'Admin'\n"})

    manifest = _compile(spec_builder)

    assert manifest.layers["roles"] == [
        {"id": "r1", "name": "Admin", "_meta": {"path": "layers/roles/admin.toml"}}
    ]


def test_every_layer_is_present_even_when_missing(spec_builder: SpecBuilder) -> None:
    manifest = _compile(spec_builder)

    assert list(manifest.layers) == [name for name, _ in LAYER_FOLDERS]
    assert all(items == [] for items in manifest.layers.values())
    assert manifest.project is None
    assert manifest.docs == []


def test_layers_recurse_into_subfolders(spec_builder: SpecBuilder) -> None:
    spec_builder.write(
        {
            "layers/use-cases/checkout.toml": "[useCase]\nid = 'uc-checkout'\n",
            "layers/use-cases/admin/approve.toml": "[useCase]\nname = 'Approve'\n",
            "layers/use-cases/admin/broken.toml": "[useCase\n",
        }
    )

    items = _compile(spec_builder).layers["useCases"]

    assert [item["id"] for item in items] == ["approve", "uc-checkout"]
    assert items[0]["_meta"] == {"path": "layers/use-cases/admin/approve.toml"}


def test_relations_are_kept_out_of_entities(roles_and_guards: SpecBuilder) -> None:
    manifest = _compile(roles_and_guards)

    guard = manifest.layers["guards"][0]
    assert guard == {
        "id": "auth-guard",
        "name": "Auth Guard",
        "_meta": {"path": "layers/guards/auth.toml"},
    }
    assert manifest.to_dict()["relations"]["graph"] == {"auth-guard": {"roles": ["admin"]}}


def test_project_about_is_special_cased(spec_builder: SpecBuilder) -> None:
    spec_builder.write(
        {"layers/project/about.toml": "[project]\nid = 'care'\nname = 'Elder Care'\n"}
    )

    manifest = _compile(spec_builder)

    assert manifest.project == {
        "id": "care",
        "name": "Elder Care",
        "_meta": {"path": "layers/project/about.toml"},
    }
    assert all(items == [] for items in manifest.layers.values())


def test_docs_are_collected_with_titles_and_ids(spec_builder: SpecBuilder) -> None:
    spec_builder.write(
        {
            "docs/overview.md": "Intro line\n# Overview\n\nBody\n",
            "docs/guides/setup-notes.md": "## Not a title\nplain\n",
            "docs/guides/image.png": "binary",
        }
    )

    docs = [doc.to_dict() for doc in _compile(spec_builder).docs]

    assert docs == [
        {
            "id": "guides-setup-notes",
            "title": "setup-notes",
            "content": "## Not a title\nplain\n",
            "_meta": {"path": "docs/guides/setup-notes.md"},
        },
        {
            "id": "overview",
            "title": "Overview",
            "content": "Intro line\n# Overview\n\nBody\n",
            "_meta": {"path": "docs/overview.md"},
        },
    ]


def test_manifest_key_order(roles_and_guards: SpecBuilder) -> None:
    payload = _compile(roles_and_guards).to_dict()

    assert list(payload) == ["version", "project", "layers", "docs", "relations"]
    assert list(payload["relations"]) == ["byId", "graph"]


def test_extract_heading_falls_back() -> None:
    assert extract_heading("# Title here\n", "x") == "Title here"
    assert extract_heading("no heading", "fallback") == "fallback"
