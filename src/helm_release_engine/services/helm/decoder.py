"""Decoding of Helm release payloads.

Helm's storage drivers have written release payloads in several layouts over
time: base64 of gzip of JSON, gzip of JSON, or plain JSON. The format is not
self-describing, so each transformation is attempted in turn and skipped when
it does not apply. Only the final JSON parse can fail.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import zlib

import structlog

from helm_release_engine.integrations.kubernetes.exceptions import HelmDecodeError
from helm_release_engine.integrations.kubernetes.models.helm import DecodedSnapshot

logger = structlog.get_logger()


def _try_base64(data: bytes) -> bytes:
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        return data
    return decoded or data


def _try_gunzip(data: bytes) -> bytes:
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error):
        return data


def decode_release_payload(payload: bytes | str) -> DecodedSnapshot:
    """Decode a stored release payload into a snapshot tree.

    Args:
        payload: Raw payload bytes as stored by Helm (or their text form).

    Returns:
        The parsed release document.

    Raises:
        HelmDecodeError: If the payload is not a JSON object after the
            optional base64 and gzip stages.
    """
    data = payload.encode() if isinstance(payload, str) else bytes(payload)
    data = _try_gunzip(_try_base64(data))

    try:
        snapshot = json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise HelmDecodeError(f"failed to unmarshal release JSON: {e}") from e

    if not isinstance(snapshot, dict):
        raise HelmDecodeError(
            f"release JSON must be an object, got {type(snapshot).__name__}"
        )
    return snapshot


def try_decode_release_payload(payload: bytes | str | None) -> DecodedSnapshot | None:
    """Decode a payload, returning None instead of raising on failure."""
    if payload is None:
        return None
    try:
        return decode_release_payload(payload)
    except HelmDecodeError as e:
        logger.debug("release_payload_decode_failed", stage=e.stage, error=e.message)
        return None
