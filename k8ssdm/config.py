"""
Kubernetes config context discovery and configuration file loading.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from kubernetes import config as kube_config

logger = logging.getLogger(__name__)

SDM_CONFIG_ENV_VARS = ("SDM_CONFIG_PATH", "ATOMIST_CONFIG_PATH")
DEFAULT_KUBE_CONFIG = "~/.kube/config"


def find_kube_config(path: Optional[str] = None) -> str:
    """
    Return the kube config file(s) to load.

    Uses path if given, else $KUBECONFIG (which may list several files
    separated by os.pathsep), else ~/.kube/config.
    """
    return path or os.environ.get("KUBECONFIG") or DEFAULT_KUBE_CONFIG


def kube_config_context(path: Optional[str] = None) -> str:
    """
    Return the current context of the kube config, or "" if unknown.

    Multiple files in $KUBECONFIG are merged the way kubectl does.

    Args:
        path: Optional path to the kube config file

    Returns:
        Name of the current context
    """
    config_file = find_kube_config(path)
    try:
        _, current = kube_config.list_kube_config_contexts(config_file=config_file)
    except (kube_config.ConfigException, yaml.YAMLError) as e:
        logger.debug(f"No usable kube config at {config_file}: {e}")
        return ""

    context = (current or {}).get("name") or ""
    logger.debug(f"Current kube context from {config_file}: {context or '-'}")
    return str(context)


def load_document(path: str) -> Dict[str, Any]:
    """
    Load a YAML or JSON document that must be a mapping.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not hold a mapping
    """
    doc_path = Path(path)
    if not doc_path.exists():
        raise FileNotFoundError(f"{path} not found")

    with open(doc_path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    return data


def find_sdm_config() -> Optional[Path]:
    """
    Find the user's SDM client configuration.

    Checks $SDM_CONFIG_PATH and $ATOMIST_CONFIG_PATH, then
    ~/.atomist/client.config.json.

    Returns:
        Path to the configuration or None if not found
    """
    for var in SDM_CONFIG_ENV_VARS:
        value = os.environ.get(var)
        if value and Path(value).exists():
            return Path(value)

    candidate = Path.home() / ".atomist" / "client.config.json"
    if candidate.exists():
        return candidate
    return None
