"""
Encodings for DrusillaSelect model state.

The state is four named fields, always written in this order:
    candidate_set      float64 [l*m, dim]
    candidate_indices  int64 [l*m]
    l                  int
    m                  int

Supported encodings:
- "binary": numpy .npz archive
- "json": JSON text
- "yaml": YAML document

All encodings reproduce float64 values exactly, so a restored model gives
bit-identical search results.
"""

import io
import json
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import yaml

from .exceptions import SerializationError

STATE_FIELDS = ("candidate_set", "candidate_indices", "l", "m")

ENCODINGS = ("binary", "json", "yaml")

SUFFIX_ENCODINGS = {
    ".npz": "binary",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def infer_encoding(path: Union[str, Path], encoding: Optional[str] = None) -> str:
    """
    Resolve the encoding for a file, explicit value first, then the suffix.

    Raises:
        SerializationError: If the encoding is unknown or can't be inferred
    """
    if encoding is not None:
        if encoding not in ENCODINGS:
            raise SerializationError(
                f"Unknown encoding '{encoding}'. Supported: {ENCODINGS}"
            )
        return encoding

    suffix = Path(path).suffix.lower()
    if suffix not in SUFFIX_ENCODINGS:
        raise SerializationError(
            f"Cannot infer encoding from suffix '{suffix}'. "
            f"Use one of {sorted(SUFFIX_ENCODINGS)} or pass encoding="
        )
    return SUFFIX_ENCODINGS[suffix]


def _to_plain(state: Dict[str, Any]) -> Dict[str, Any]:
    """Convert state arrays to nested lists of Python scalars."""
    return {
        "candidate_set": state["candidate_set"].tolist(),
        "candidate_indices": state["candidate_indices"].tolist(),
        "l": int(state["l"]),
        "m": int(state["m"]),
    }


def _from_plain(plain: Dict[str, Any]) -> Dict[str, Any]:
    """Rebuild state arrays from nested lists."""
    candidate_set = np.asarray(plain["candidate_set"], dtype=np.float64)
    if candidate_set.size == 0:
        candidate_set = candidate_set.reshape(0, 0)

    return {
        "candidate_set": candidate_set,
        "candidate_indices": np.asarray(plain["candidate_indices"], dtype=np.int64),
        "l": int(plain["l"]),
        "m": int(plain["m"]),
    }


def encode_state(state: Dict[str, Any], encoding: str) -> bytes:
    """
    Encode a model state dict.

    Args:
        state: Dict with the four STATE_FIELDS
        encoding: One of ENCODINGS

    Returns:
        Encoded bytes
    """
    if encoding == "binary":
        buffer = io.BytesIO()
        np.savez(
            buffer,
            candidate_set=state["candidate_set"],
            candidate_indices=state["candidate_indices"],
            l=np.int64(state["l"]),
            m=np.int64(state["m"]),
        )
        return buffer.getvalue()

    if encoding == "json":
        return json.dumps(_to_plain(state), indent=2).encode("utf-8")

    if encoding == "yaml":
        return yaml.safe_dump(_to_plain(state), sort_keys=False).encode("utf-8")

    raise SerializationError(f"Unknown encoding '{encoding}'. Supported: {ENCODINGS}")


def decode_state(payload: bytes, encoding: str) -> Dict[str, Any]:
    """
    Decode bytes produced by encode_state().

    Args:
        payload: Encoded state
        encoding: One of ENCODINGS

    Returns:
        Dict with the four STATE_FIELDS

    Raises:
        SerializationError: If the payload can't be decoded or lacks a field
    """
    try:
        if encoding == "binary":
            with np.load(io.BytesIO(payload), allow_pickle=False) as archive:
                return {
                    "candidate_set": archive["candidate_set"].astype(np.float64),
                    "candidate_indices": archive["candidate_indices"].astype(np.int64),
                    "l": int(archive["l"]),
                    "m": int(archive["m"]),
                }

        if encoding == "json":
            plain = json.loads(payload.decode("utf-8"))
        elif encoding == "yaml":
            plain = yaml.safe_load(payload.decode("utf-8"))
        else:
            raise SerializationError(
                f"Unknown encoding '{encoding}'. Supported: {ENCODINGS}"
            )

        if not isinstance(plain, dict):
            raise SerializationError(f"Expected a mapping of state fields, got {type(plain).__name__}")
        return _from_plain(plain)

    except SerializationError:
        raise
    except (KeyError, ValueError, TypeError, OSError, zipfile.BadZipFile, yaml.YAMLError) as exc:
        raise SerializationError(f"Could not decode {encoding} state: {exc}") from exc
