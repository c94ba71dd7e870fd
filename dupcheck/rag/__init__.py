"""Retrieval-augmented duplicate detection.

Pipeline: ``SimilarDefectsRetriever`` (embed -> near-vector -> context block)
feeds ``DuplicateDetector`` (prompt -> LLM -> ``DuplicateReport``), whose
output can be persisted with ``save_report``.
"""

from dupcheck.rag.retriever import SimilarDefectsRetriever, format_context
from dupcheck.rag.detector import DuplicateDetector
from dupcheck.rag.report import load_report, save_report, summarize_reports

__all__ = [
    "SimilarDefectsRetriever",
    "DuplicateDetector",
    "format_context",
    "save_report",
    "load_report",
    "summarize_reports",
]
