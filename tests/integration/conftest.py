"""In-memory collaborators for pipeline tests.

``HashingEmbeddings`` is a bag-of-words embedding (crc32 buckets, L2
normalized) so that textually close defects get high cosine similarity.
``InMemoryDefectStore`` mirrors ``DefectVectorStore``'s surface using cosine
distance.  ``ThresholdJudge`` stands in for the chat model: it reads the top
score from the context block and answers in the report JSON format.
"""

import json
import math
import re
import threading
import zlib
from typing import Dict, List, Optional

import pytest

from dupcheck.models import Defect
from dupcheck.rag import DuplicateDetector, SimilarDefectsRetriever
from dupcheck.store.loader import iter_defect_files, load_defect_file
from dupcheck.store.weaviate_store import VectorHit, defect_properties

DIMENSIONS = 256


class HashingEmbeddings:
    def embed_query(self, text: str) -> List[float]:
        vector = [0.0] * DIMENSIONS
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            vector[zlib.crc32(token.encode()) % DIMENSIONS] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


class InMemoryDefectStore:
    def __init__(self, embeddings):
        self.embeddings = embeddings
        self._rows: List[Dict] = []
        self._lock = threading.Lock()

    def insert_defect(self, defect: Defect) -> str:
        vector = self.embeddings.embed_query(defect.embedding_text())
        with self._lock:
            self._rows.append({"properties": defect_properties(defect), "vector": vector})
        return str(defect.id)

    def insert_from_directory(self, directory) -> int:
        inserted = 0
        for path in iter_defect_files(directory):
            try:
                self.insert_defect(load_defect_file(path))
            except ValueError:
                continue
            inserted += 1
        return inserted

    def get_defect(self, defect_id) -> Optional[Dict]:
        for row in self._rows:
            if row["properties"]["defectId"] == str(defect_id):
                return dict(row["properties"])
        return None

    def delete_defect(self, defect_id) -> int:
        with self._lock:
            before = len(self._rows)
            self._rows = [r for r in self._rows if r["properties"]["defectId"] != str(defect_id)]
            return before - len(self._rows)

    def near_vector(self, vector, max_distance, limit) -> List[VectorHit]:
        scored = []
        for row in self._rows:
            distance = 1.0 - sum(a * b for a, b in zip(vector, row["vector"]))
            if distance <= max_distance:
                scored.append(VectorHit(properties=dict(row["properties"]), distance=distance))
        scored.sort(key=lambda h: h.distance)
        return scored[:limit]


class _Message:
    def __init__(self, content):
        self.content = content


class ThresholdJudge:
    """Declares a duplicate when the best retrieved score reaches ``cutoff``."""

    def __init__(self, cutoff: float = 0.7):
        self.cutoff = cutoff
        self.calls = 0

    def invoke(self, messages):
        self.calls += 1
        prompt = messages[0].content
        context = prompt.split("CONTEXT - Similar defects from database:")[1].split("NEW DEFECT:")[0]
        scores = [float(s) for s in re.findall(r"Score: ([0-9.]+)", context)]
        ids = re.findall(r"ID: (\S+)", context)

        if scores and scores[0] >= self.cutoff:
            payload = {
                "IsDuplicate": True,
                "Reason": f"Same root cause as defect {ids[0]}",
                "Defects": [{"Id": int(ids[0])}],
                "Confidence": 0.9,
            }
        else:
            payload = {
                "IsDuplicate": False,
                "Reason": "No stored defect shares the root cause",
                "Defects": [],
                "Confidence": 0.1,
            }
        return _Message(json.dumps(payload))


@pytest.fixture
def embeddings():
    return HashingEmbeddings()


@pytest.fixture
def populated_store(embeddings, fixtures_dir):
    store = InMemoryDefectStore(embeddings)
    assert store.insert_from_directory(fixtures_dir / "bugs") == 3
    return store


@pytest.fixture
def retriever(embeddings, populated_store):
    return SimilarDefectsRetriever(embeddings, populated_store, min_similarity=0.1, limit=5)


@pytest.fixture
def judge():
    return ThresholdJudge()


@pytest.fixture
def detector(judge, retriever):
    return DuplicateDetector(judge, retriever)
