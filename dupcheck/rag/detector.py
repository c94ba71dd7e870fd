"""Duplicate adjudication: retrieved context + new defect -> LLM verdict.

``detect_duplicate`` is fail-closed: any error along the way (retrieval,
model call, empty output, invalid JSON, schema mismatch) yields a report with
``IsDuplicate = false`` and ``Confidence = 0.0`` whose ``Reason`` carries the
error.  Callers always receive a well-formed ``DuplicateReport``.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from dupcheck.models import DuplicateReport
from dupcheck.rag.prompt import build_messages
from dupcheck.rag.report import save_report
from dupcheck.utils.json_sanitizer import parse_llm_json
from dupcheck.utils.logger import ContextLogger, get_logger

DEFAULT_CONFIDENCE_THRESHOLD = 0.8


def _message_text(response) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Content blocks: keep text parts only
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return content or ""


class DuplicateDetector:
    """Decide whether a new defect duplicates a stored one.

    Args:
        llm: Chat model with ``invoke(messages)`` configured for temperature
            0.0 and JSON-object output (see ``llm_factory.get_langchain_llm``).
        retriever: ``SimilarDefectsRetriever`` providing the context block.
        confidence_threshold: Duplicate verdicts at or below this confidence
            are logged as inconsistent with the prompt rules.
        logger: Optional ``ContextLogger``.
    """

    def __init__(
        self,
        llm,
        retriever,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        logger: Optional[ContextLogger] = None,
    ):
        self.llm = llm
        self.retriever = retriever
        self.confidence_threshold = confidence_threshold
        self.log = logger or get_logger("detector")

    def detect_duplicate(self, summary: str, description: str) -> DuplicateReport:
        query = f"{summary}. {description}"

        try:
            context = self.retriever.retrieve_context(query)
            response = self.llm.invoke(build_messages(context=context, query=query))
            report = DuplicateReport.from_payload(parse_llm_json(_message_text(response)))
        except Exception as e:
            self.log.error("Duplicate analysis failed", error=str(e), error_type=type(e).__name__)
            return DuplicateReport.fail_closed(f"Error during analysis: {e}")

        if report.is_duplicate:
            if report.confidence <= self.confidence_threshold:
                self.log.warning(
                    "Duplicate verdict below confidence threshold",
                    confidence=report.confidence,
                    threshold=self.confidence_threshold,
                )
            self.log.info(
                "Duplicate detected",
                confidence=report.confidence,
                existing_defects=[d.id for d in report.defects],
            )
        else:
            self.log.info("No duplicate found", confidence=report.confidence)

        return report

    def save_report(self, report: DuplicateReport, path: Union[str, Path]) -> Path:
        return save_report(report, path, logger=self.log)
