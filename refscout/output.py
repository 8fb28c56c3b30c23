"""JSON serialisation of resolved references."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from refscout import __version__
from refscout.config import ResolutionResult
from refscout.resolver import ProjectResolver


def build_result(resolvers: Iterable[ProjectResolver], total_ms: float = 0.0) -> ResolutionResult:
    """Snapshot the current state of each resolver."""
    projects = []
    for r in resolvers:
        projects.append({
            "name": r.name,
            "file_path": r.file_path,
            "state": r.state.value,
            "package_cache_root": r.package_cache_root,
            "target": r.asset_index.target if r.asset_index is not None else None,
            "error": str(r.last_error) if r.last_error else None,
            "references": [
                {"name": ref.name, "version": ref.version, "path": ref.path}
                for ref in r.references
            ],
        })

    return ResolutionResult(
        version="1.0",
        metadata={
            "resolved_at": datetime.now(timezone.utc).isoformat(),
            "refscout_version": __version__,
            "duration_ms": round(total_ms, 1),
            "reference_count": sum(len(p["references"]) for p in projects),
        },
        projects=projects,
    )


def write_output(result: ResolutionResult, output_path: str) -> None:
    """Write the result to a JSON file."""
    data = asdict(result)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2, default=str)
