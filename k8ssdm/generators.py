"""
Kubernetes manifest generators for bootstrapping the SDM in a cluster.

Generates Namespace, ServiceAccount, ClusterRole, ClusterRoleBinding and
Deployment. The Deployment mounts the configuration secret at the same path
and with the same mode the self-deployment augmentation uses.
"""

from typing import Any, Dict, List

from .types import (
    CONFIG_PATH_ENV,
    SECRET_CONFIG_KEY,
    SECRET_DEFAULT_MODE,
    SECRET_MOUNT_PATH,
    BootstrapConfig,
    ProbeConfig,
)

RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
ALL_VERBS = ["get", "list", "watch", "create", "update", "patch", "delete"]

CLUSTER_ROLE_RULES = [
    {
        "apiGroups": [""],
        "resources": ["namespaces", "pods", "secrets", "serviceaccounts", "services"],
    },
    {
        "apiGroups": ["apps", "extensions"],
        "resources": ["deployments"],
    },
    {
        "apiGroups": ["extensions"],
        "resources": ["ingresses"],
    },
    {
        "apiGroups": ["rbac.authorization.k8s.io"],
        "resources": ["clusterroles", "clusterrolebindings", "roles", "rolebindings"],
    },
]


def _build_probe(probe: ProbeConfig) -> Dict[str, Any]:
    """Build Kubernetes HTTP probe spec."""
    return {
        "httpGet": {
            "path": probe.path,
            "port": probe.port,
            "scheme": "HTTP",
        },
        "initialDelaySeconds": probe.initial_delay,
        "timeoutSeconds": probe.timeout,
        "periodSeconds": probe.period,
        "successThreshold": probe.success_threshold,
        "failureThreshold": probe.failure_threshold,
    }


def generate_namespace(config: BootstrapConfig) -> Dict[str, Any]:
    """Generate the Namespace the SDM runs in."""
    return {
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {
            "name": config.namespace,
            "labels": dict(config.labels),
        },
    }


def generate_service_account(config: BootstrapConfig) -> Dict[str, Any]:
    """Generate the ServiceAccount the SDM deploys applications with."""
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {
            "name": config.name,
            "namespace": config.namespace,
            "labels": dict(config.labels),
        },
    }


def generate_cluster_role(config: BootstrapConfig) -> Dict[str, Any]:
    """
    Generate the ClusterRole granting full control over the resources the
    SDM creates, updates and removes.
    """
    return {
        "apiVersion": RBAC_API_VERSION,
        "kind": "ClusterRole",
        "metadata": {
            "name": config.name,
            "labels": dict(config.labels),
        },
        "rules": [
            {
                "apiGroups": list(rule["apiGroups"]),
                "resources": list(rule["resources"]),
                "verbs": list(ALL_VERBS),
            }
            for rule in CLUSTER_ROLE_RULES
        ],
    }


def generate_cluster_role_binding(config: BootstrapConfig) -> Dict[str, Any]:
    """Generate the ClusterRoleBinding of the ClusterRole to the ServiceAccount."""
    return {
        "apiVersion": RBAC_API_VERSION,
        "kind": "ClusterRoleBinding",
        "metadata": {
            "name": config.name,
            "labels": dict(config.labels),
        },
        "roleRef": {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "ClusterRole",
            "name": config.name,
        },
        "subjects": [
            {
                "kind": "ServiceAccount",
                "name": config.name,
                "namespace": config.namespace,
            },
        ],
    }


def generate_deployment(config: BootstrapConfig) -> Dict[str, Any]:
    """
    Generate the SDM Deployment manifest.

    Args:
        config: Bootstrap settings

    Returns:
        Deployment manifest dict
    """
    resources = config.resources
    limits: Dict[str, Any] = {}
    if resources.cpu_limit:
        limits["cpu"] = resources.cpu_limit
    limits["memory"] = resources.memory_limit

    container: Dict[str, Any] = {
        "name": config.name,
        "image": config.image,
        "imagePullPolicy": config.image_pull_policy,
        "env": [
            {
                "name": CONFIG_PATH_ENV,
                "value": f"{SECRET_MOUNT_PATH}/{SECRET_CONFIG_KEY}",
            },
        ],
        "ports": [
            {
                "name": "http",
                "containerPort": config.port,
                "protocol": "TCP",
            },
        ],
        "livenessProbe": _build_probe(config.liveness),
        "readinessProbe": _build_probe(config.readiness),
        "resources": {
            "limits": limits,
            "requests": {
                "cpu": resources.cpu,
                "memory": resources.memory,
            },
        },
        "volumeMounts": [
            {
                "mountPath": SECRET_MOUNT_PATH,
                "name": config.name,
                "readOnly": True,
            },
        ],
    }

    template_labels = dict(config.labels)
    template_labels["app.kubernetes.io/version"] = config.version

    return {
        "kind": "Deployment",
        "apiVersion": "apps/v1",
        "metadata": {
            "name": config.name,
            "namespace": config.namespace,
            "labels": dict(config.labels),
        },
        "spec": {
            "replicas": config.replicas,
            "revisionHistoryLimit": config.revision_history_limit,
            "selector": {
                "matchLabels": {
                    "app.kubernetes.io/name": config.name,
                },
            },
            "template": {
                "metadata": {
                    "labels": template_labels,
                },
                "spec": {
                    "serviceAccountName": config.name,
                    "containers": [container],
                    "volumes": [
                        {
                            "name": config.name,
                            "secret": {
                                "defaultMode": SECRET_DEFAULT_MODE,
                                "secretName": config.name,
                            },
                        },
                    ],
                },
            },
            "strategy": {
                "type": "RollingUpdate",
                "rollingUpdate": {
                    "maxUnavailable": 0,
                    "maxSurge": 1,
                },
            },
        },
    }


def generate_all_manifests(config: BootstrapConfig) -> List[Dict[str, Any]]:
    """
    Generate all cluster-wide manifests, in the order they must be applied.

    Args:
        config: Bootstrap settings

    Returns:
        List of manifest dicts
    """
    return [
        generate_namespace(config),
        generate_service_account(config),
        generate_cluster_role(config),
        generate_cluster_role_binding(config),
        generate_deployment(config),
    ]
