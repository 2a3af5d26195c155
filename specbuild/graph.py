"""Relation graph construction with computed backlinks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from .extractors import extract_entity
from .extractors.entity import STRUCTURED_SUFFIX
from .logging import get_logger
from .models import ExtractedEntity, GraphEntry, IdCollision, ParseFailure, RelationGraph
from .reader import StructuredDocumentReader

logger = get_logger("graph")


class RelationGraphBuilder:
    """Indexes layer entities by id and folder and inverts their relations."""

    def __init__(
        self,
        reader: StructuredDocumentReader | None = None,
        *,
        layers_dir: str = "layers",
    ) -> None:
        self.reader = reader or StructuredDocumentReader()
        self.layers_dir = layers_dir

    def collect(self, layers_root: Path) -> Dict[str, List[ExtractedEntity]]:
        """Extract entities from the top-level TOML files of every layer folder."""
        try:
            with os.scandir(layers_root) as iterator:
                folders = sorted(
                    entry.name for entry in iterator if entry.is_dir(follow_symlinks=False)
                )
        except OSError as exc:
            logger.warning("Could not read layers directory %s: %s", layers_root, exc)
            return {}

        collected: Dict[str, List[ExtractedEntity]] = {}
        for folder in folders:
            collected[folder] = self._collect_folder(layers_root / folder, folder)
        return collected

    def build(self, entities_by_folder: Mapping[str, Sequence[ExtractedEntity]]) -> RelationGraph:
        graph = RelationGraph()

        for folder, entities in entities_by_folder.items():
            folder_ids = graph.by_folder.setdefault(folder, [])
            for entity in entities:
                previous = graph.by_id.get(entity.id)
                if previous is not None:
                    logger.warning(
                        "Duplicate id %r in %s overrides %s",
                        entity.id,
                        entity.source_path,
                        previous.path,
                    )
                    graph.collisions.append(
                        IdCollision(id=entity.id, previous_path=previous.path, path=entity.source_path)
                    )
                graph.by_id[entity.id] = GraphEntry(
                    path=entity.source_path, folder=folder, title=entity.title
                )
                folder_ids.append(entity.id)
                if entity.relations:
                    graph.relations[entity.id] = entity.relations

        for source_id, relations in graph.relations.items():
            for target_ids in relations.values():
                for target_id in target_ids:
                    backlinks = graph.referenced_by.setdefault(target_id, [])
                    if source_id not in backlinks:
                        backlinks.append(source_id)

        logger.info(
            "Found %d entities across %d folders",
            len(graph.by_id),
            len(graph.by_folder),
        )
        logger.info(
            "Found %d relations, %d backlinks",
            graph.relation_count(),
            graph.backlink_count(),
        )
        return graph

    def _collect_folder(self, folder_path: Path, folder: str) -> List[ExtractedEntity]:
        try:
            with os.scandir(folder_path) as iterator:
                names = sorted(
                    entry.name
                    for entry in iterator
                    if entry.is_file(follow_symlinks=False)
                    and entry.name.endswith(STRUCTURED_SUFFIX)
                )
        except OSError as exc:
            logger.warning("Could not read layer folder %s: %s", folder_path, exc)
            return []

        documents = self.reader.read_many([folder_path / name for name in names])
        entities: List[ExtractedEntity] = []
        for name, document in zip(names, documents):
            if isinstance(document, ParseFailure):
                continue
            entities.append(
                extract_entity(
                    document,
                    name,
                    folder=folder,
                    source_path=f"{self.layers_dir}/{folder}/{name}",
                )
            )
        return entities


__all__ = ["RelationGraphBuilder"]
