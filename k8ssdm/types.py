"""
Type definitions for the k8s-sdm self-deployment adapter.

These dataclasses represent the application descriptor handed over by the
Kubernetes deployment engine, the deployment goal the SDM runs under, the
runtime configuration embedded as a secret, and the settings of the
cluster-wide bootstrap manifest.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


SDM_NAMESPACE = "sdm"
SDM_NAME = "k8s-sdm"
SDM_PORT = 2866
HEALTH_PATH = "/health"

SECRET_CONFIG_KEY = "client.config.json"
SECRET_MOUNT_PATH = "/opt/atm"
SECRET_DEFAULT_MODE = 256  # 0o400
CONFIG_PATH_ENV = "ATOMIST_CONFIG_PATH"
CLUSTER_WORKERS = 2

LOCAL_CONTEXTS = ("minikube",)

NGINX_INGRESS_ANNOTATIONS = {
    "kubernetes.io/ingress.class": "nginx",
    "nginx.ingress.kubernetes.io/rewrite-target": "/",
    "nginx.ingress.kubernetes.io/ssl-redirect": "false",
}


class Protocol(str, Enum):
    """Protocol used to reach the application through its ingress."""
    HTTP = "http"
    HTTPS = "https"


@dataclass(frozen=True)
class KubernetesApplication:
    """Desired deployed state of one application.

    Mirrors the document the deployment engine consumes. The nested specs
    are partial Kubernetes resources which the engine merges into the
    resources it creates.
    """
    name: str
    ns: str = "default"
    workspace_id: Optional[str] = None
    image: Optional[str] = None
    port: Optional[int] = None
    path: Optional[str] = None
    host: Optional[str] = None
    protocol: Optional[Protocol] = None
    replicas: Optional[int] = None
    deployment_spec: Optional[Dict[str, Any]] = None
    service_spec: Optional[Dict[str, Any]] = None
    ingress_spec: Optional[Dict[str, Any]] = None
    secrets: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "KubernetesApplication":
        protocol = data.get("protocol")
        return cls(
            name=data["name"],
            ns=data.get("ns", data.get("namespace", "default")),
            workspace_id=data.get("workspaceId"),
            image=data.get("image"),
            port=data.get("port"),
            path=data.get("path"),
            host=data.get("host"),
            protocol=Protocol(protocol) if protocol else None,
            replicas=data.get("replicas"),
            deployment_spec=copy.deepcopy(data.get("deploymentSpec")),
            service_spec=copy.deepcopy(data.get("serviceSpec")),
            ingress_spec=copy.deepcopy(data.get("ingressSpec")),
            secrets=copy.deepcopy(data.get("secrets")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "ns": self.ns,
        }
        optional = {
            "workspaceId": self.workspace_id,
            "image": self.image,
            "port": self.port,
            "path": self.path,
            "host": self.host,
            "protocol": self.protocol.value if self.protocol else None,
            "replicas": self.replicas,
            "deploymentSpec": self.deployment_spec,
            "serviceSpec": self.service_spec,
            "ingressSpec": self.ingress_spec,
            "secrets": self.secrets,
        }
        for key, value in optional.items():
            if value is not None:
                result[key] = copy.deepcopy(value)
        return result


@dataclass(frozen=True)
class AugmentedApplication:
    """Application descriptor that has been prepared for self-deployment.

    Deliberately not a KubernetesApplication: augmentation appends a secret,
    volume, mount and env entry, so it must happen exactly once.
    """
    application: KubernetesApplication
    cluster_context: str = ""

    @property
    def name(self) -> str:
        return self.application.name

    @property
    def ns(self) -> str:
        return self.application.ns

    def to_dict(self) -> Dict[str, Any]:
        return self.application.to_dict()


@dataclass
class SdmConfiguration:
    """
    Configuration of the running SDM.

    build carries the SDM's own build settings from
    sdm.configuration.sdm.build. The runtime configuration does not
    include them; they are kept so callers can read them off the goal.
    """
    name: str
    api_key: Optional[str] = None
    environment: Optional[str] = None
    build: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "SdmConfiguration":
        data = data or {}
        sdm = data.get("sdm") or {}
        return cls(
            name=data.get("name", ""),
            api_key=data.get("apiKey"),
            environment=data.get("environment"),
            build=dict(sdm.get("build") or {}),
        )


@dataclass
class GoalDetails:
    """Details declared on the deployment goal."""
    environment: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "GoalDetails":
        if not data:
            return cls()
        return cls(environment=data.get("environment"))


@dataclass
class KubernetesDeployGoal:
    """The Kubernetes deployment goal the SDM is executing."""
    configuration: SdmConfiguration
    details: GoalDetails = field(default_factory=GoalDetails)

    @classmethod
    def from_dict(cls, data: Dict) -> "KubernetesDeployGoal":
        sdm = data.get("sdm") or {}
        return cls(
            configuration=SdmConfiguration.from_dict(sdm.get("configuration")),
            details=GoalDetails.from_dict(data.get("details")),
        )

    def cluster_label(self, context: Optional[str] = None) -> Optional[str]:
        """Return the first non-empty of context, goal environment and SDM environment."""
        return context or self.details.environment or self.configuration.environment or None


@dataclass
class RuntimeConfiguration:
    """Configuration the deployed SDM reads from its mounted secret."""
    name: str
    api_key: Optional[str]
    workspace_ids: List[str]
    environment: Optional[str] = None
    cluster_workers: int = CLUSTER_WORKERS

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.api_key is not None:
            result["apiKey"] = self.api_key
        result["workspaceIds"] = list(self.workspace_ids)
        if self.environment is not None:
            result["environment"] = self.environment
        result["cluster"] = {"workers": self.cluster_workers}
        return result

    @classmethod
    def from_dict(cls, data: Dict) -> "RuntimeConfiguration":
        return cls(
            name=data["name"],
            api_key=data.get("apiKey"),
            workspace_ids=list(data.get("workspaceIds", [])),
            environment=data.get("environment"),
            cluster_workers=(data.get("cluster") or {}).get("workers", CLUSTER_WORKERS),
        )


@dataclass
class ResourcesConfig:
    """Resource requests and limits."""
    memory: str = "320Mi"
    cpu: str = "100m"
    memory_limit: str = "384Mi"
    cpu_limit: Optional[str] = "500m"

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ResourcesConfig":
        if not data:
            return cls()
        return cls(
            memory=data.get("memory", "320Mi"),
            cpu=data.get("cpu", "100m"),
            memory_limit=data.get("memory_limit", "384Mi"),
            cpu_limit=data.get("cpu_limit", "500m"),
        )


@dataclass
class ProbeConfig:
    """HTTP health check probe configuration."""
    path: str = HEALTH_PATH
    port: Any = "http"
    initial_delay: int = 20
    period: int = 20
    timeout: int = 3
    success_threshold: int = 1
    failure_threshold: int = 3

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "ProbeConfig":
        if not data:
            return cls()
        return cls(
            path=data.get("path", HEALTH_PATH),
            port=data.get("port", "http"),
            initial_delay=data.get("initial_delay", 20),
            period=data.get("period", 20),
            timeout=data.get("timeout", 3),
            success_threshold=data.get("success_threshold", 1),
            failure_threshold=data.get("failure_threshold", 3),
        )


@dataclass
class BootstrapConfig:
    """Settings of the cluster-wide manifest that bootstraps the SDM."""
    name: str = SDM_NAME
    namespace: str = SDM_NAMESPACE
    image: str = "atomist/k8s-sdm:1.0.3"
    image_pull_policy: str = "IfNotPresent"
    replicas: int = 1
    revision_history_limit: int = 5
    port: int = SDM_PORT
    resources: ResourcesConfig = field(default_factory=ResourcesConfig)
    liveness: ProbeConfig = field(default_factory=ProbeConfig)
    readiness: ProbeConfig = field(default_factory=ProbeConfig)
    version: str = "1"

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "BootstrapConfig":
        if not data:
            return cls()
        probes = data.get("probes") or {}
        return cls(
            name=data.get("name", SDM_NAME),
            namespace=data.get("namespace", SDM_NAMESPACE),
            image=data.get("image", "atomist/k8s-sdm:1.0.3"),
            image_pull_policy=data.get("image_pull_policy", "IfNotPresent"),
            replicas=data.get("replicas", 1),
            revision_history_limit=data.get("revision_history_limit", 5),
            port=data.get("port", SDM_PORT),
            resources=ResourcesConfig.from_dict(data.get("resources")),
            liveness=ProbeConfig.from_dict(probes.get("liveness")),
            readiness=ProbeConfig.from_dict(probes.get("readiness")),
            version=str(data.get("version", "1")),
        )

    @property
    def labels(self) -> Dict[str, str]:
        return {
            "app.kubernetes.io/name": self.name,
            "app.kubernetes.io/part-of": self.name,
            "app.kubernetes.io/managed-by": "atomist",
        }
