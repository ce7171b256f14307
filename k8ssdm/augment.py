"""
Prepare the SDM's own application descriptor for deployment.

The deployment engine hands over the descriptor of the application it is
about to deploy. When that application is the SDM itself, the descriptor is
augmented so the deployed SDM can find its configuration:

- the namespace is forced to "sdm";
- a runtime configuration is generated and added as a secret, which is
  mounted read-only into the first container and announced through the
  ATOMIST_CONFIG_PATH environment variable;
- on local clusters (minikube) the ingress is routed through nginx-ingress.
"""

import dataclasses
import json
import logging
from typing import Any, Dict, Optional

from .config import kube_config_context
from .merge import get_in, merge_defaults, set_in
from .secret import encode_secret
from .types import (
    CLUSTER_WORKERS,
    CONFIG_PATH_ENV,
    LOCAL_CONTEXTS,
    NGINX_INGRESS_ANNOTATIONS,
    SDM_NAMESPACE,
    SECRET_CONFIG_KEY,
    SECRET_DEFAULT_MODE,
    SECRET_MOUNT_PATH,
    AugmentedApplication,
    KubernetesApplication,
    KubernetesDeployGoal,
    Protocol,
    RuntimeConfiguration,
)

logger = logging.getLogger(__name__)

POD_SPEC_PATH = ("spec", "template", "spec")


class AlreadyAugmentedError(TypeError):
    """Raised when an already augmented descriptor is augmented again."""


def build_runtime_configuration(
    app: KubernetesApplication,
    goal: KubernetesDeployGoal,
    kube_context: Optional[str],
) -> RuntimeConfiguration:
    """
    Create the configuration the deployed SDM will run with.

    The cluster label is the first non-empty value of the kube context, the
    goal's environment and the SDM's configured environment.
    """
    cluster = goal.cluster_label(kube_context)
    if not cluster:
        logger.warning(
            f"No cluster context or environment available for {app.name}, "
            "configuration name will end in '_undefined'"
        )
    return RuntimeConfiguration(
        name=f"{goal.configuration.name}_{cluster or 'undefined'}",
        api_key=goal.configuration.api_key,
        workspace_ids=[app.workspace_id],
        environment=cluster,
        cluster_workers=CLUSTER_WORKERS,
    )


def _secret_volume(name: str) -> Dict[str, Any]:
    return {
        "name": name,
        "secret": {
            "defaultMode": SECRET_DEFAULT_MODE,
            "secretName": name,
        },
    }


def _secret_volume_mount(name: str) -> Dict[str, Any]:
    return {
        "mountPath": SECRET_MOUNT_PATH,
        "name": name,
        "readOnly": True,
    }


def add_secret(
    app: KubernetesApplication,
    goal: KubernetesDeployGoal,
    kube_context: Optional[str],
) -> KubernetesApplication:
    """
    Add the SDM configuration as a secret and wire it into the deployment.

    The secret is named after the application and holds the JSON encoded
    runtime configuration under "client.config.json". A volume for the
    secret is added to the pod spec, mounted read-only at /opt/atm in the
    first container, and ATOMIST_CONFIG_PATH points at the mounted file.
    Existing deployment spec content is preserved.

    Args:
        app: Application descriptor
        goal: Kubernetes deployment goal the SDM is running
        kube_context: Kubernetes config context, possibly empty

    Returns:
        New descriptor with the secret and its wiring added
    """
    config = build_runtime_configuration(app, goal, kube_context)
    config_secret = encode_secret(
        app.name,
        {SECRET_CONFIG_KEY: json.dumps(config.to_dict(), separators=(",", ":"))},
    )

    pod_spec = get_in(app.deployment_spec, POD_SPEC_PATH, {})
    containers = list(pod_spec.get("containers") or [{}])
    containers[0] = merge_defaults(containers[0], {
        "volumeMounts": [_secret_volume_mount(app.name)],
        "env": [
            {
                "name": CONFIG_PATH_ENV,
                "value": f"{SECRET_MOUNT_PATH}/{SECRET_CONFIG_KEY}",
            },
        ],
    })
    pod_spec = merge_defaults(
        dict(pod_spec, containers=containers),
        {"volumes": [_secret_volume(app.name)]},
    )

    return dataclasses.replace(
        app,
        deployment_spec=set_in(app.deployment_spec, POD_SPEC_PATH, pod_spec),
        secrets=merge_defaults(app.secrets, [config_secret]),
    )


def local_ingress(
    app: KubernetesApplication,
    kube_context: Optional[str],
) -> KubernetesApplication:
    """
    Route the application through nginx-ingress when deploying locally.

    Only minikube clusters are considered local; for any other context the
    descriptor is returned unchanged. Annotations already present on the
    ingress spec take precedence over the nginx defaults.
    """
    if kube_context not in LOCAL_CONTEXTS:
        return app

    defaults = {"metadata": {"annotations": dict(NGINX_INGRESS_ANNOTATIONS)}}
    return dataclasses.replace(
        app,
        path=f"/{app.ns}/{app.name}",
        protocol=Protocol.HTTP,
        ingress_spec=merge_defaults(app.ingress_spec, defaults),
    )


def prepare_for_self_deploy(
    app: KubernetesApplication,
    goal: KubernetesDeployGoal,
    kube_context: Optional[str] = "",
) -> AugmentedApplication:
    """
    Augment an application descriptor for deploying this SDM.

    Args:
        app: Current application descriptor, left untouched
        goal: Kubernetes deployment goal the SDM is running
        kube_context: Current Kubernetes config context, possibly empty

    Returns:
        The augmented descriptor

    Raises:
        AlreadyAugmentedError: If app has already been augmented
    """
    if isinstance(app, AugmentedApplication):
        raise AlreadyAugmentedError(
            f"Application {app.name} has already been prepared for self-deployment"
        )

    k8s_app = dataclasses.replace(app, ns=SDM_NAMESPACE)
    k8s_app = add_secret(k8s_app, goal, kube_context)
    k8s_app = local_ingress(k8s_app, kube_context)

    logger.info(
        f"Prepared {k8s_app.name} for self-deployment to namespace {k8s_app.ns}"
        f" (context: {kube_context or '-'})"
    )
    return AugmentedApplication(application=k8s_app, cluster_context=kube_context or "")


async def self_deploy_app_data(
    app: KubernetesApplication,
    goal: KubernetesDeployGoal,
    project: Any = None,
    kube_config: Optional[str] = None,
) -> AugmentedApplication:
    """
    Deployment engine callback: augment app using the active kube context.

    Args:
        app: Current application descriptor
        goal: Kubernetes deployment goal
        project: Project being deployed, unused
        kube_config: Optional path to the kube config file

    Returns:
        The augmented descriptor
    """
    return prepare_for_self_deploy(app, goal, kube_config_context(kube_config))
