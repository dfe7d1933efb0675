"""
Batch resolution over tabular payloads.

Each DataFrame row is one payload; columns are payload fields. NaN cells
(fields a row does not have) are treated as absent; an explicit None is kept
as null. Payload files are loaded with object columns so values round-trip
unchanged.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from .models import UnionSpec
from .resolver import FALLBACK_OUTCOMES, Resolution, explain

logger = logging.getLogger(__name__)


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder for numpy scalars and arrays coming out of DataFrames."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super().default(obj)


@dataclass
class ResolutionSummary:
    """Counts of a batch resolution."""
    total: int
    variant_counts: Dict[str, int] = field(default_factory=dict)  # schema name -> rows
    outcome_counts: Dict[str, int] = field(default_factory=dict)  # outcome -> rows

    @property
    def fallback_count(self) -> int:
        return sum(self.outcome_counts.get(o, 0) for o in FALLBACK_OUTCOMES)

    def pct_fallback(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.fallback_count / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "variant_counts": self.variant_counts,
            "outcome_counts": self.outcome_counts,
            "fallback_count": self.fallback_count,
        }


def _is_absent(value: Any) -> bool:
    if value is None or isinstance(value, (list, dict, tuple, np.ndarray)):
        return False
    return bool(pd.isna(value))


def _row_payload(row: Dict[str, Any]) -> Dict[str, Any]:
    """Drop NaN cells so they read as absent fields."""
    return {key: value for key, value in row.items() if not _is_absent(value)}


def explain_frame(df: pd.DataFrame, union_spec: UnionSpec) -> List[Resolution]:
    """Resolve every row, keeping the strategy that decided each one."""
    return [
        explain(union_spec, _row_payload(row))
        for row in df.to_dict(orient="records")
    ]


def resolve_frame(
    df: pd.DataFrame,
    union_spec: UnionSpec,
    column: str = "variant",
) -> pd.DataFrame:
    """
    Resolve every row of `df`.

    Args:
        df: One payload per row
        union_spec: Union to resolve against
        column: Output column for the resolved schema name

    Returns:
        Copy of df with `column` added
    """
    out, _ = resolve_and_summarize(df, union_spec, column=column)
    return out


def resolve_and_summarize(
    df: pd.DataFrame,
    union_spec: UnionSpec,
    column: str = "variant",
) -> Tuple[pd.DataFrame, ResolutionSummary]:
    """Resolve every row once; return the resolved copy and its summary."""
    resolutions = explain_frame(df, union_spec)

    out = df.copy()
    out[column] = [r.schema_name for r in resolutions]
    logger.info(f"Resolved {len(out)} payloads against {len(union_spec.schemas)} schemas")

    return out, _summarize_resolutions(resolutions, union_spec)


def summarize(df: pd.DataFrame, union_spec: UnionSpec) -> ResolutionSummary:
    """Count resolved variants and deciding outcomes for `df`."""
    return _summarize_resolutions(explain_frame(df, union_spec), union_spec)


def _summarize_resolutions(
    resolutions: List[Resolution],
    union_spec: UnionSpec,
) -> ResolutionSummary:
    variant_counts = {name: 0 for name in union_spec.schema_names}
    outcome_counts: Dict[str, int] = {}
    for resolution in resolutions:
        variant_counts[resolution.schema_name] += 1
        outcome_counts[resolution.outcome] = outcome_counts.get(resolution.outcome, 0) + 1

    return ResolutionSummary(
        total=len(resolutions),
        variant_counts=variant_counts,
        outcome_counts=outcome_counts,
    )


def read_payloads(path: Path) -> pd.DataFrame:
    """
    Load payloads from a JSON Lines (.jsonl/.ndjson) or JSON array file.

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If a JSON file does not hold an array of objects
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Payload file not found: {path}")

    if path.suffix in (".jsonl", ".ndjson"):
        records = []
        with open(path, "r") as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
    else:
        with open(path, "r") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"Expected a JSON array of payloads in {path}")

    # Object columns keep ints as ints when other rows lack the field
    return pd.DataFrame(records, dtype=object)


def write_payloads(df: pd.DataFrame, path: Path) -> None:
    """Write rows as JSON Lines, omitting NaN cells (explicit nulls are kept)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for row in df.to_dict(orient="records"):
            f.write(json.dumps(_row_payload(row), cls=NumpyEncoder) + "\n")
