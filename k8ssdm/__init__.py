"""
K8s SDM - deploy the SDM to Kubernetes.

Augments the SDM's own application descriptor with its runtime configuration
secret and local ingress settings, and generates the cluster-wide manifests
that bootstrap it.
"""

__version__ = "1.0.4"

from .types import (
    AugmentedApplication,
    BootstrapConfig,
    GoalDetails,
    KubernetesApplication,
    KubernetesDeployGoal,
    Protocol,
    RuntimeConfiguration,
    SdmConfiguration,
)

from .secret import (
    decode_secret,
    encode_secret,
)

from .config import kube_config_context

from .schema import (
    load_application,
    load_goal,
    validate_application,
    validate_goal,
)

from .augment import (
    AlreadyAugmentedError,
    add_secret,
    local_ingress,
    prepare_for_self_deploy,
    self_deploy_app_data,
)

from .generators import generate_all_manifests

__all__ = [
    # Types
    "AugmentedApplication",
    "BootstrapConfig",
    "GoalDetails",
    "KubernetesApplication",
    "KubernetesDeployGoal",
    "Protocol",
    "RuntimeConfiguration",
    "SdmConfiguration",
    # Secrets
    "decode_secret",
    "encode_secret",
    # Config
    "kube_config_context",
    "load_application",
    "load_goal",
    "validate_application",
    "validate_goal",
    # Augmentation
    "AlreadyAugmentedError",
    "add_secret",
    "local_ingress",
    "prepare_for_self_deploy",
    "self_deploy_app_data",
    # Generators
    "generate_all_manifests",
]
