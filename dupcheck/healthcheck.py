"""Health check module for verifying external service connections.

Provides functions to test connectivity to the chat model, the embedding
model and Weaviate before running ingestion or duplicate detection.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dupcheck.config import Config, get_config
from dupcheck.utils.logger import log_error, log_info


@dataclass
class HealthCheckResult:
    """Result of a single health check."""
    service: str
    healthy: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


def _short(error: Exception) -> str:
    error_msg = str(error)
    if len(error_msg) > 100:
        error_msg = error_msg[:100] + "..."
    return error_msg


def check_llm(config: Optional[Config] = None) -> HealthCheckResult:
    """Check chat-completion connectivity with a one-token request."""
    from dupcheck.llm_factory import ping_llm

    config = config or get_config()
    if not config.openai_api_key:
        return HealthCheckResult(service="LLM", healthy=False, message="OPENAI_API_KEY not set")

    try:
        description = ping_llm(config)
    except Exception as e:
        return HealthCheckResult(service="LLM", healthy=False, message=f"Connection failed: {_short(e)}")

    return HealthCheckResult(
        service="LLM",
        healthy=True,
        message=f"Connected ({description})",
        details={"provider": config.llm_provider},
    )


def check_embeddings(config: Optional[Config] = None, embeddings=None) -> HealthCheckResult:
    """Check the embedding model by embedding a short string."""
    config = config or get_config()
    if not config.openai_api_key:
        return HealthCheckResult(service="Embeddings", healthy=False, message="OPENAI_API_KEY not set")

    try:
        if embeddings is None:
            from dupcheck.llm_factory import get_embeddings
            embeddings = get_embeddings(config)
        vector = embeddings.embed_query("ping")
    except Exception as e:
        return HealthCheckResult(service="Embeddings", healthy=False, message=f"Connection failed: {_short(e)}")

    return HealthCheckResult(
        service="Embeddings",
        healthy=True,
        message=f"Connected (dimensions: {len(vector)})",
        details={"dimensions": len(vector)},
    )


def check_weaviate(config: Optional[Config] = None, client=None) -> HealthCheckResult:
    """Check that Weaviate is ready and report whether the collection exists."""
    config = config or get_config()
    owns_client = client is None

    try:
        if client is None:
            from dupcheck.store import connect_weaviate
            client = connect_weaviate(config)
        if not client.is_ready():
            return HealthCheckResult(service="Weaviate", healthy=False, message="Weaviate is not ready")
        exists = client.collections.exists(config.collection_name)
    except Exception as e:
        return HealthCheckResult(service="Weaviate", healthy=False, message=f"Connection failed: {_short(e)}")
    finally:
        if owns_client and client is not None:
            client.close()

    state = "present" if exists else "missing (run init-schema)"
    return HealthCheckResult(
        service="Weaviate",
        healthy=True,
        message=f"Connected ({config.weaviate_host}:{config.weaviate_http_port}, collection {state})",
        details={"collection": config.collection_name, "collection_exists": exists},
    )


def run_health_checks(verbose: bool = True, config: Optional[Config] = None) -> Tuple[bool, List[HealthCheckResult]]:
    """Run all health checks.

    Args:
        verbose: If True, print results to stdout
        config: Configuration to check; defaults to ``get_config()``

    Returns:
        Tuple of (all_healthy, list of results)
    """
    config = config or get_config()
    checks = [
        ("chat model", check_llm),
        ("embedding model", check_embeddings),
        ("Weaviate", check_weaviate),
    ]

    if verbose:
        print("\nRunning health checks...\n")

    results = []
    for label, check in checks:
        if verbose:
            print(f"  Checking {label}...", end=" ", flush=True)
        result = check(config)
        results.append(result)
        if verbose:
            icon = "ok" if result.healthy else "FAIL"
            print(f"{icon} {result.message}")

    all_healthy = all(r.healthy for r in results)

    if verbose:
        print()
        if all_healthy:
            print("All services ready!\n")
        else:
            failed = [r.service for r in results if not r.healthy]
            print(f"Health check failed for: {', '.join(failed)}\n")

    for result in results:
        if result.healthy:
            log_info(f"Health check passed: {result.service}", **result.details)
        else:
            log_error(f"Health check failed: {result.service}", message=result.message)

    return all_healthy, results


if __name__ == "__main__":
    # Allow running directly: python -m dupcheck.healthcheck
    from dotenv import load_dotenv
    load_dotenv()

    all_healthy, _ = run_health_checks()
    sys.exit(0 if all_healthy else 1)
