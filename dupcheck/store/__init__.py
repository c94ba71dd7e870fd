"""Vector-store collaborator for stored defects."""

from dupcheck.store.weaviate_store import DefectVectorStore, VectorHit, connect_weaviate

__all__ = ["DefectVectorStore", "VectorHit", "connect_weaviate"]
