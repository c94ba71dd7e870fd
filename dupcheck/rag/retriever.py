"""Similarity retrieval: embed -> near-vector search -> score -> context block."""
from __future__ import annotations

from typing import List, Optional

from dupcheck.models import SimilarDefect
from dupcheck.utils.logger import ContextLogger, get_logger

NO_SIMILAR_DEFECTS = "No similar defects found."
CONTEXT_HEADER = "Similar defects found in database:"


def distance_to_similarity(distance: float) -> float:
    """Cosine distance (0 = identical) to similarity in [0, 1]."""
    return max(0.0, min(1.0, 1.0 - distance))


def format_context(defects: List[SimilarDefect]) -> str:
    """Render retrieved defects as the context block injected into the prompt."""
    if not defects:
        return NO_SIMILAR_DEFECTS

    lines = [CONTEXT_HEADER, ""]
    for i, defect in enumerate(defects, start=1):
        lines.extend([
            f"Defect #{i}:",
            f"ID: {defect.id}",
            f"Score: {defect.score:.4f}",
            f"Summary: {defect.summary}",
            f"Description: {defect.description}",
            "---",
        ])
    return "\n".join(lines) + "\n"


class SimilarDefectsRetriever:
    """Turn free-text defect descriptions into ranked similar stored defects.

    Args:
        embeddings: LangChain ``Embeddings`` (anything with ``embed_query``).
        store: ``DefectVectorStore`` (anything with ``near_vector``).
        min_similarity: Hits below this similarity are excluded by the store
            via the equivalent distance cutoff ``1 - min_similarity``.
        limit: Maximum number of hits returned.
        logger: Optional ``ContextLogger``.

    Embedding and vector-store errors propagate; retries belong to the
    collaborators.
    """

    def __init__(
        self,
        embeddings,
        store,
        min_similarity: float = 0.4,
        limit: int = 5,
        logger: Optional[ContextLogger] = None,
    ):
        if not 0.0 <= min_similarity <= 1.0:
            raise ValueError("min_similarity must be between 0.0 and 1.0")
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.embeddings = embeddings
        self.store = store
        self.min_similarity = min_similarity
        self.limit = limit
        self.log = logger or get_logger("retriever")

    @property
    def max_distance(self) -> float:
        return 1.0 - self.min_similarity

    def retrieve_similar(self, query: str) -> List[SimilarDefect]:
        vector = self.embeddings.embed_query(query)
        hits = self.store.near_vector(vector, self.max_distance, self.limit)

        defects = []
        for hit in hits[: self.limit]:
            props = hit.properties
            defect_id = props.get("defectId")
            defects.append(SimilarDefect(
                id=str(defect_id) if defect_id is not None else "unknown",
                summary=str(props.get("summary") or ""),
                description=str(props.get("description") or ""),
                score=distance_to_similarity(hit.distance),
            ))

        self.log.debug(
            "Similar defects retrieved",
            hits=len(defects),
            max_distance=round(self.max_distance, 4),
            top_score=defects[0].score if defects else None,
        )
        return defects

    def retrieve_context(self, query: str) -> str:
        return format_context(self.retrieve_similar(query))
