"""
Kubernetes Secret encoding.
"""

import base64
from typing import Any, Dict, Optional


def encode_secret(
    name: str,
    data: Dict[str, str],
    namespace: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Generate an Opaque Secret manifest with base64-encoded data.

    Args:
        name: Secret name
        data: Plain text values keyed by file name
        namespace: Optional namespace to stamp on the secret

    Returns:
        Secret manifest dict
    """
    metadata: Dict[str, Any] = {"name": name}
    if namespace:
        metadata["namespace"] = namespace

    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "type": "Opaque",
        "metadata": metadata,
        "data": {
            key: base64.b64encode(value.encode("utf-8")).decode("ascii")
            for key, value in data.items()
        },
    }


def decode_secret(secret: Dict[str, Any]) -> Dict[str, str]:
    """Return the plain text data of a Secret manifest."""
    return {
        key: base64.b64decode(value).decode("utf-8")
        for key, value in (secret.get("data") or {}).items()
    }
