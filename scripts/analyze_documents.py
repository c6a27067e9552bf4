#!/usr/bin/env python3
"""
Batch decay analysis utility.
Reads documents and their versions from a JSON file and prints public verdicts.

Input format:
    {
        "documents": [{"id": ..., "type": "SOP", "content": ..., "updatedAt": ...}, ...],
        "versions": {"<document id>": [{"versionNumber": 2, "content": ...}, ...]}
    }
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from knowledge_decay.core.config import VERSION, debug_enabled, get_embedding_provider, load_config, validate_config
from knowledge_decay.core.decay_engine import DecayEngine, batch_analyze, build_audit_record, to_public_payload
from knowledge_decay.core.models import BatchItemResult, coerce_document
from knowledge_decay.core.related import search_documents
from knowledge_decay.vector.embeddings import check_embedding_health
from util.logging import logger


def load_input(path: Path) -> Dict[str, Any]:
    """Load the documents file. Accepts a bare list of documents too."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = {"documents": data}
    data.setdefault("versions", {})
    return data


def format_report(results: List[BatchItemResult]) -> str:
    """Human-readable summary of a batch run."""
    lines = []
    flagged = sum(1 for r in results if r.verdict.decay_detected)
    failed = sum(1 for r in results if not r.ok)

    lines.append(f"Documents analyzed: {len(results)}")
    lines.append(f"Decay detected: {flagged}")
    if failed:
        lines.append(f"Failed: {failed}")

    for result in results:
        label = result.title or result.document_id
        verdict = result.verdict
        if not result.ok:
            lines.append(f"  ! {label}: ERROR - {result.error}")
            continue
        marker = "*" if verdict.decay_detected else "-"
        lines.append(f"  {marker} {label}: confidence {verdict.confidence_score:.2f}, risk {verdict.risk_level}")
        for reason in verdict.decay_reasons:
            lines.append(f"      [{reason.type}] {reason.description}")

    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Detect knowledge decay across a set of documents")
    parser.add_argument("input", nargs="?", type=Path, help="JSON file with documents and versions")
    parser.add_argument("--json", action="store_true", help="Print public verdicts as JSON")
    parser.add_argument("--audit", action="store_true", help="Include audit records (internal use only)")
    parser.add_argument("--search", metavar="TEXT", help="List the documents nearest to TEXT instead of analyzing")
    parser.add_argument("--top-k", type=int, default=5, help="Number of search results (default 5)")
    parser.add_argument("--health", action="store_true", help="Check the embedding provider and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    args = parser.parse_args(argv)

    if debug_enabled():
        logger.logger.setLevel(logging.DEBUG)

    config = load_config()
    issues = validate_config(config)
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}", file=sys.stderr)
        return 1

    provider = get_embedding_provider(config)

    if args.health:
        print(json.dumps(check_embedding_health(provider), indent=2))
        return 0

    if args.input is None:
        parser.error("input file is required")

    try:
        data = load_input(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: Failed to read {args.input}: {e}", file=sys.stderr)
        return 1

    documents = data.get("documents", [])

    if args.search:
        candidates = [coerce_document(d).with_embedding(provider.embed_text(d.get("content") or "")) for d in documents]
        matches = search_documents(provider.embed_text(args.search), candidates, top_k=args.top_k)
        for match in matches:
            print(f"{match.similarity:.3f}  {match.document.display_title}")
        return 0

    engine = DecayEngine(config=config, embedding_provider=provider)
    results = batch_analyze(documents, candidate_pool=documents, versions_by_document=data["versions"], engine=engine)

    if args.json or args.audit:
        output = []
        for result in results:
            item = to_public_payload(result)
            if args.audit and result.ok:
                item["audit"] = build_audit_record(result)
            output.append(item)
        print(json.dumps(output, indent=2, default=str))
    else:
        print(format_report(results))

    return 0


if __name__ == "__main__":
    sys.exit(main())
