"""Main entry point for the defect duplicate detector.

Loads environment variables, builds the Weaviate store, retriever and
detector from configuration, and runs one of the maintenance or detection
commands.
"""
from dotenv import load_dotenv
import argparse
import json
import sys
from pathlib import Path
from typing import Tuple

# Load environment variables first, before any other imports
load_dotenv()

from dupcheck.config import get_config
from dupcheck.utils.logger import configure_logging, log_agent_progress, log_error, log_info, log_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect duplicate defects with vector retrieval and an LLM judge.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("healthcheck", help="Check LLM, embedding and Weaviate connectivity.")
    sub.add_parser("init-schema", help="Create the defect collection if missing.")
    sub.add_parser("drop-collection", help="Delete the defect collection.")

    ingest = sub.add_parser("ingest", help="Insert every *.json defect file from a directory.")
    ingest.add_argument("directory", type=str, help="Directory containing defect JSON files.")

    get = sub.add_parser("get", help="Print a stored defect by id.")
    get.add_argument("defect_id", type=int)

    delete = sub.add_parser("delete", help="Delete a stored defect by id.")
    delete.add_argument("defect_id", type=int)

    check = sub.add_parser("check", help="Adjudicate defect JSON files against the store.")
    check.add_argument("files", nargs="+", help="Defect JSON files to check.")
    check.add_argument("--report-dir", type=str, help="Where to write <name>_report.json (default: REPORTS_DIR).")

    return parser


def build_components(config):
    """Wire client, store, retriever and detector from configuration."""
    from dupcheck.llm_factory import get_embeddings, get_langchain_llm
    from dupcheck.rag import DuplicateDetector, SimilarDefectsRetriever
    from dupcheck.store import DefectVectorStore, connect_weaviate

    embeddings = get_embeddings(config)
    client = connect_weaviate(config)
    store = DefectVectorStore(client, config.collection_name, embeddings)
    retriever = SimilarDefectsRetriever(
        embeddings,
        store,
        min_similarity=config.retrieval_min_similarity,
        limit=config.retrieval_limit,
    )
    detector = DuplicateDetector(
        get_langchain_llm(config),
        retriever,
        confidence_threshold=config.duplicate_confidence_threshold,
    )
    return client, store, detector


def run_check(detector, files, report_dir: Path) -> Tuple[int, int]:
    """Adjudicate each defect file.

    Files that cannot be read or parsed are logged and skipped.

    Returns:
        Tuple of (duplicates found, files skipped)
    """
    from dupcheck.store.loader import load_defect_file

    duplicates = 0
    skipped = 0
    for file in files:
        try:
            defect = load_defect_file(file)
        except (OSError, ValueError) as e:
            log_error("Skipping unreadable defect file", file=str(file), error=str(e))
            print(f"{file}: skipped ({e})")
            skipped += 1
            continue
        report = detector.detect_duplicate(defect.summary, defect.description)
        detector.save_report(report, report_dir / f"{Path(file).stem}_report.json")
        if report.is_duplicate:
            duplicates += 1
            log_warning("Duplicate defect", file=str(file), existing_defects=[d.id for d in report.defects])
        print(f"{file}: {'DUPLICATE' if report.is_duplicate else 'new'} "
              f"(confidence {report.confidence:.2f}) - {report.reason}")
    return duplicates, skipped


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    configure_logging(config.log_level, config.log_format)

    if args.command == "healthcheck":
        from dupcheck.healthcheck import run_health_checks
        all_healthy, _ = run_health_checks(verbose=True, config=config)
        return 0 if all_healthy else 1

    config.log_configuration()
    issues = config.validate_configuration()
    if issues:
        log_error("Configuration validation failed", issues=issues)
        print("Configuration issues found:")
        for issue in issues:
            print(f"  - {issue}")
        print("\nPlease fix these issues and try again.")
        return 1

    client, store, detector = build_components(config)
    try:
        if args.command == "init-schema":
            created = store.ensure_schema()
            log_info("Schema ready", collection=config.collection_name, created=created)
        elif args.command == "drop-collection":
            store.delete_collection()
        elif args.command == "ingest":
            store.ensure_schema()
            inserted = store.insert_from_directory(args.directory)
            log_agent_progress("Ingestion finished", inserted=inserted)
        elif args.command == "get":
            found = store.get_defect(args.defect_id)
            if found is None:
                print(f"Defect {args.defect_id} not found.")
                return 1
            print(json.dumps(found, indent=2, ensure_ascii=False, default=str))
        elif args.command == "delete":
            removed = store.delete_defect(args.defect_id)
            return 0 if removed else 1
        elif args.command == "check":
            report_dir = Path(args.report_dir or config.reports_dir)
            log_agent_progress("Checking defects", count=len(args.files), report_dir=str(report_dir))
            duplicates, skipped = run_check(detector, args.files, report_dir)
            log_agent_progress("Check finished", duplicates=duplicates, skipped=skipped, total=len(args.files))
            if skipped:
                return 1
    finally:
        client.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
