"""
Schema validation and loading for application descriptors and deployment goals.
"""

from typing import Any, Dict, List, Optional

import jsonschema

from .config import find_sdm_config, load_document
from .types import KubernetesApplication, KubernetesDeployGoal

_OBJECT = {"type": "object"}

APPLICATION_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "ns": {"type": "string"},
        "namespace": {"type": "string"},
        "workspaceId": {"type": "string"},
        "image": {"type": "string"},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "path": {"type": "string"},
        "host": {"type": "string"},
        "protocol": {"enum": ["http", "https"]},
        "replicas": {"type": "integer", "minimum": 0},
        "deploymentSpec": {
            "type": "object",
            "properties": {
                "spec": {
                    "type": "object",
                    "properties": {
                        "template": {
                            "type": "object",
                            "properties": {
                                "spec": {
                                    "type": "object",
                                    "properties": {
                                        "containers": {"type": "array", "items": _OBJECT},
                                        "volumes": {"type": "array", "items": _OBJECT},
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
        "serviceSpec": _OBJECT,
        "ingressSpec": {
            "type": "object",
            "properties": {
                "metadata": {
                    "type": "object",
                    "properties": {
                        "annotations": {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                        },
                    },
                },
            },
        },
        "secrets": {"type": "array", "items": _OBJECT},
    },
}

GOAL_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["sdm"],
    "properties": {
        "sdm": {
            "type": "object",
            "required": ["configuration"],
            "properties": {
                "configuration": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {"type": "string", "minLength": 1},
                        "apiKey": {"type": "string"},
                        "environment": {"type": "string"},
                        "sdm": _OBJECT,
                    },
                },
            },
        },
        "details": {
            "type": "object",
            "properties": {
                "environment": {"type": "string"},
            },
        },
    },
}


def _validate(data: Any, schema: Dict[str, Any]) -> List[str]:
    validator = jsonschema.Draft7Validator(schema)
    errors = []
    for error in validator.iter_errors(data):
        path = ".".join(str(p) for p in error.absolute_path)
        errors.append(f"{path}: {error.message}" if path else error.message)
    return errors


def validate_application(data: Any) -> List[str]:
    """
    Validate an application descriptor document.

    Returns list of validation errors (empty if valid).
    """
    return _validate(data, APPLICATION_SCHEMA)


def validate_goal(data: Any) -> List[str]:
    """
    Validate a deployment goal document.

    Returns list of validation errors (empty if valid).
    """
    return _validate(data, GOAL_SCHEMA)


def load_application(path: str, validate: bool = True) -> KubernetesApplication:
    """
    Load and parse an application descriptor file.

    Raises:
        FileNotFoundError: If the file is not found
        ValueError: If validation fails
    """
    data = load_document(path)
    if validate:
        errors = validate_application(data)
        if errors:
            raise ValueError(f"{path} validation failed:\n" + "\n".join(errors))
    return KubernetesApplication.from_dict(data)


def load_goal(path: Optional[str] = None, validate: bool = True) -> KubernetesDeployGoal:
    """
    Load and parse a deployment goal.

    Without a path, the goal is built from the user's SDM client
    configuration, which becomes goal.sdm.configuration.

    Raises:
        FileNotFoundError: If no goal or SDM configuration is found
        ValueError: If validation fails
    """
    if path:
        source = path
        data = load_document(path)
    else:
        sdm_config = find_sdm_config()
        if sdm_config is None:
            raise FileNotFoundError("SDM client configuration not found")
        source = str(sdm_config)
        data = {"sdm": {"configuration": load_document(source)}}

    if validate:
        errors = validate_goal(data)
        if errors:
            raise ValueError(f"{source} validation failed:\n" + "\n".join(errors))
    return KubernetesDeployGoal.from_dict(data)
