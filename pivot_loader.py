"""
Pivot Loader Module
===================
Reads pivot matrices saved from the pivot API and validates them.
Pure data operations — no UI / tkinter dependencies.

A file holds either one matrix::

    {"rows": [...], "columns": [...], "data": {...}, "maxValue": 5}

or a bundle of matrices keyed by data type::

    {"subject": "P-001", "symptom": {...}, "diagnosis": {...}}

Usage:
    from pivot_loader import load_pivot_json

    results = load_pivot_json("P-001.json")
    # results["symptom"].matrix, results["symptom"].warnings, ...
"""

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

from config import DATA_TYPES, DATA_TYPE_ORDER
from pivot_matrix import MatrixIntegrityError, PivotMatrix

logger = logging.getLogger("MatrixViewer.PivotLoader")

# Data type assumed for a single-matrix file when none is given
DEFAULT_DATA_TYPE = "symptom"


# =============================================================================
# Result container
# =============================================================================

@dataclass
class LoadResult:
    """One validated pivot matrix plus what was noticed while loading it."""
    matrix: PivotMatrix
    data_type: str
    subject: str = ""
    file_path: str = ""
    warnings: List[str] = field(default_factory=list)


# =============================================================================
# Collaborator route
# =============================================================================

def pivot_api_path(data_type: str, subject_id) -> str:
    """Route of the pivot API for *data_type* and one subject."""
    if data_type not in DATA_TYPES:
        raise ValueError(f"Unknown data type {data_type!r}")
    endpoint = DATA_TYPES[data_type]["endpoint"]
    return f"/api/pivot/{endpoint}/{quote(str(subject_id), safe='')}"


# =============================================================================
# Parsing
# =============================================================================

def parse_pivot_payload(payload: Mapping) -> Tuple[PivotMatrix, List[str]]:
    """Validate one pivot payload.

    Returns:
        (matrix, warnings)

    Raises:
        MatrixIntegrityError: the payload breaks the matrix contract.
    """
    matrix = PivotMatrix.from_payload(payload)
    warnings: List[str] = []

    observed = matrix.observed_max()
    if matrix.max_value is None:
        warnings.append(f"maxValue missing; using observed maximum {observed}")
    elif matrix.max_value != observed:
        msg = f"maxValue {matrix.max_value} inconsistent with observed maximum {observed}"
        logger.warning(msg)
        warnings.append(msg)

    if matrix.is_empty():
        warnings.append("Matrix has no non-zero cells")
    return matrix, warnings


def is_bundle(payload) -> bool:
    return isinstance(payload, Mapping) and "rows" not in payload and any(k in DATA_TYPES for k in payload)


# =============================================================================
# Main loader
# =============================================================================

def load_pivot_json(path: str, data_type: Optional[str] = None,
                    subject: Optional[str] = None) -> Dict[str, LoadResult]:
    """Load a pivot JSON file (single matrix or bundle).

    Args:
        path: Full path to the .json file.
        data_type: Data type of a single-matrix file (default 'symptom').
        subject: Subject id; overrides the bundle's "subject" key.

    Returns:
        {data_type: LoadResult}, in DATA_TYPE_ORDER.

    Raises:
        FileNotFoundError: if *path* does not exist.
        ValueError: the file is not JSON or names an unknown data type.
        MatrixIntegrityError: a matrix breaks the contract.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"File not found: {path}")

    logger.info("Loading pivot file: %s", path)
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if is_bundle(payload):
        subject = subject if subject is not None else str(payload.get("subject", ""))
        unknown = [k for k in payload if k != "subject" and k not in DATA_TYPES]
        if unknown:
            logger.warning("Ignoring unknown data type key(s) in %s: %s", path, ", ".join(unknown))
        entries = [(dt, payload[dt]) for dt in DATA_TYPE_ORDER if dt in payload]
    else:
        data_type = data_type or DEFAULT_DATA_TYPE
        if data_type not in DATA_TYPES:
            raise ValueError(f"Unknown data type {data_type!r}")
        entries = [(data_type, payload)]

    results: Dict[str, LoadResult] = {}
    for dt, entry in entries:
        try:
            matrix, warnings = parse_pivot_payload(entry)
        except MatrixIntegrityError as e:
            raise MatrixIntegrityError(f"{dt}: {e}") from e
        results[dt] = LoadResult(matrix, dt, subject or "", path, warnings)
        logger.info("Loaded %s: %d rows, %d columns, max %d",
                    dt, len(matrix.rows), len(matrix.columns), matrix.observed_max())
    return results
