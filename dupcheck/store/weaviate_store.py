"""Weaviate adapter for the defect collection.

Vectors are produced client-side by the configured embedding model and
stored under a single self-provided named vector (``"default"``); Weaviate
only indexes and searches them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import weaviate
from weaviate.classes.config import Configure, DataType, Property
from weaviate.classes.init import Auth
from weaviate.classes.query import Filter, MetadataQuery

from dupcheck.models import Defect
from dupcheck.store.loader import iter_defect_files, load_defect_file
from dupcheck.utils.logger import ContextLogger, get_logger

VECTOR_NAME = "default"

DEFECT_PROPERTIES = (
    "defectId",
    "summary",
    "description",
    "fullText",
    "severity",
    "status",
    "component",
    "priority",
)


@dataclass
class VectorHit:
    """A single near-vector match: stored properties plus reported distance."""

    properties: Dict[str, Any] = field(default_factory=dict)
    distance: float = 1.0


def connect_weaviate(config) -> "weaviate.WeaviateClient":
    """Open a Weaviate client from ``Config``."""
    auth = Auth.api_key(config.weaviate_api_key) if config.weaviate_api_key else None
    return weaviate.connect_to_local(
        host=config.weaviate_host,
        port=config.weaviate_http_port,
        grpc_port=config.weaviate_grpc_port,
        auth_credentials=auth,
    )


def canonical_id(defect_id: Union[int, str]) -> str:
    """Stored form of a defect id: ``"042"`` and ``42`` both become ``"42"``."""
    return str(int(defect_id))


def defect_properties(defect: Defect) -> Dict[str, str]:
    """Properties stored for a defect; blank labels are stored as ``unknown``."""
    return {
        "defectId": str(defect.id),
        "summary": defect.summary,
        "description": defect.description,
        "fullText": defect.embedding_text(),
        "severity": defect.severity or "unknown",
        "status": defect.status or "unknown",
        "component": defect.component or "unknown",
        "priority": defect.priority or "unknown",
    }


class DefectVectorStore:
    """CRUD and similarity queries over the defect collection.

    Args:
        client: Connected ``weaviate.WeaviateClient``.
        collection_name: Name of the defect collection.
        embeddings: LangChain ``Embeddings`` used to vectorize defects on insert.
        logger: Optional ``ContextLogger``; defaults to the ``dupcheck.store`` logger.
    """

    def __init__(
        self,
        client,
        collection_name: str,
        embeddings,
        logger: Optional[ContextLogger] = None,
    ):
        self.client = client
        self.collection_name = collection_name
        self.embeddings = embeddings
        self.log = logger or get_logger("store")

    @property
    def collection(self):
        return self.client.collections.get(self.collection_name)

    # ── Schema ───────────────────────────────────────────────────

    def ensure_schema(self) -> bool:
        """Create the collection if it does not exist yet.

        Returns:
            True if the collection was created, False if it already existed.
        """
        if self.client.collections.exists(self.collection_name):
            self.log.info("Collection already exists", collection=self.collection_name)
            return False

        self.log.info("Creating collection", collection=self.collection_name)
        self.client.collections.create(
            name=self.collection_name,
            description="Software defect records",
            properties=[
                Property(name=name, data_type=DataType.TEXT)
                for name in DEFECT_PROPERTIES
            ],
            vectorizer_config=[Configure.NamedVectors.none(name=VECTOR_NAME)],
        )
        return True

    def delete_collection(self) -> None:
        self.client.collections.delete(self.collection_name)
        self.log.info("Collection deleted", collection=self.collection_name)

    # ── Writes ───────────────────────────────────────────────────

    def insert_defect(self, defect: Defect) -> str:
        """Embed and insert a single defect; returns the object UUID."""
        vector = self.embeddings.embed_query(defect.embedding_text())
        uuid = self.collection.data.insert(
            properties=defect_properties(defect),
            vector={VECTOR_NAME: list(vector)},
        )
        self.log.info("Inserted defect", defect_id=defect.id)
        return str(uuid)

    def insert_from_directory(self, directory: Union[str, Path]) -> int:
        """Ingest every ``*.json`` defect file in ``directory``.

        Files that fail to parse or insert are logged and skipped.

        Raises:
            FileNotFoundError: If ``directory`` does not exist.
        """
        files = iter_defect_files(directory)
        self.log.info("Found defect files to process", count=len(files), directory=str(directory))

        inserted = 0
        for path in files:
            try:
                self.insert_defect(load_defect_file(path))
            except Exception as e:
                self.log.error("Error processing defect file", file=str(path), error=str(e))
                continue
            inserted += 1

        self.log.info("Ingestion finished", inserted=inserted, skipped=len(files) - inserted)
        return inserted

    def delete_defect(self, defect_id: Union[int, str]) -> int:
        """Delete every object whose ``defectId`` equals ``defect_id``.

        Returns:
            Number of matching objects.

        Raises:
            ValueError: If ``defect_id`` is not an integer.
        """
        defect_id = canonical_id(defect_id)
        result = self.collection.data.delete_many(
            where=Filter.by_property("defectId").equal(defect_id)
        )
        matches = getattr(result, "matches", 0) or 0
        if matches:
            self.log.info("Deleted defect", defect_id=defect_id, removed=matches)
        else:
            self.log.warning("Defect not found", defect_id=defect_id)
        return matches

    def update_defect(self, defect_id: Union[int, str], defect: Defect) -> str:
        """Replace a defect by deleting and reinserting it.

        The two steps are not atomic: a concurrent reader may observe the
        defect as missing until the reinsert completes.
        """
        defect_id = canonical_id(defect_id)
        self.delete_defect(defect_id)
        return self.insert_defect(defect.model_copy(update={"id": int(defect_id)}))

    # ── Reads ────────────────────────────────────────────────────

    def get_defect(self, defect_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Return the stored properties for ``defect_id``, or None."""
        response = self.collection.query.fetch_objects(
            filters=Filter.by_property("defectId").equal(canonical_id(defect_id)),
            limit=1,
        )
        if not response.objects:
            return None
        return dict(response.objects[0].properties)

    def near_vector(
        self,
        vector: Sequence[float],
        max_distance: float,
        limit: int,
    ) -> List[VectorHit]:
        """Nearest stored defects within ``max_distance``, best first."""
        response = self.collection.query.near_vector(
            near_vector=list(vector),
            distance=max_distance,
            limit=limit,
            target_vector=VECTOR_NAME,
            return_metadata=MetadataQuery(distance=True),
        )

        hits = []
        for obj in response.objects:
            distance = getattr(obj.metadata, "distance", None) if obj.metadata else None
            hits.append(VectorHit(
                properties=dict(obj.properties or {}),
                distance=1.0 if distance is None else float(distance),
            ))
        return hits
