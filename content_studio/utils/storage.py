"""
Storage Utilities
=================

Save and load snapshots of a content package (the workflow state).
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import yaml

from ..core.exceptions import ValidationError
from ..models import WorkflowState

logger = logging.getLogger(__name__)

VALID_FORMATS = {"json", "yaml"}


def _resolve_format(path: Path, format: Optional[str]) -> str:
    if format:
        fmt = format.lower()
    else:
        fmt = "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"

    if fmt not in VALID_FORMATS:
        raise ValidationError(
            f"Unsupported snapshot format: {format}",
            field="format",
            value=format,
            constraint="json or yaml",
        )
    return fmt


def save_package(
    state: WorkflowState,
    output_path: Union[str, Path],
    format: Optional[str] = None,
) -> str:
    """
    Save a workflow state snapshot to a file.

    Args:
        state: State to save
        output_path: Path to save the snapshot
        format: "json" or "yaml" (inferred from the suffix when omitted)

    Returns:
        Path to saved snapshot
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fmt = _resolve_format(output_path, format)

    data = state.to_dict()
    data["saved_at"] = datetime.now().isoformat()

    with open(output_path, "w", encoding="utf-8") as f:
        if fmt == "yaml":
            yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Package saved to {output_path}")
    return str(output_path)


def load_package(path: Union[str, Path]) -> Optional[WorkflowState]:
    """
    Load a workflow state snapshot.

    Returns:
        The restored state, or None if the file does not exist
    """
    path = Path(path)
    if not path.exists():
        return None

    with open(path, "r", encoding="utf-8") as f:
        if _resolve_format(path, None) == "yaml":
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    data.pop("saved_at", None)
    return WorkflowState.from_dict(data)
