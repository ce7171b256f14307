"""Tests for k8ssdm types."""

import dataclasses

import pytest

from k8ssdm.types import (
    AugmentedApplication,
    BootstrapConfig,
    GoalDetails,
    KubernetesApplication,
    KubernetesDeployGoal,
    Protocol,
    ResourcesConfig,
    RuntimeConfiguration,
    SdmConfiguration,
)


class TestKubernetesApplication:
    def test_from_dict_minimal(self):
        app = KubernetesApplication.from_dict({"name": "svc"})
        assert app.name == "svc"
        assert app.ns == "default"
        assert app.deployment_spec is None
        assert app.secrets is None

    def test_from_dict_full(self):
        data = {
            "name": "svc",
            "ns": "production",
            "workspaceId": "T1",
            "image": "svc:1.0",
            "port": 8080,
            "path": "/svc",
            "protocol": "https",
            "replicas": 2,
            "deploymentSpec": {"spec": {"template": {"spec": {"containers": [{}]}}}},
            "ingressSpec": {"metadata": {"annotations": {"a": "b"}}},
            "secrets": [{"metadata": {"name": "other"}}],
        }
        app = KubernetesApplication.from_dict(data)
        assert app.ns == "production"
        assert app.workspace_id == "T1"
        assert app.port == 8080
        assert app.protocol == Protocol.HTTPS
        assert app.ingress_spec["metadata"]["annotations"] == {"a": "b"}
        assert len(app.secrets) == 1

    def test_namespace_alias(self):
        app = KubernetesApplication.from_dict({"name": "svc", "namespace": "apps"})
        assert app.ns == "apps"

    def test_from_dict_copies_nested_specs(self):
        data = {"name": "svc", "ingressSpec": {"metadata": {}}}
        app = KubernetesApplication.from_dict(data)
        app.ingress_spec["metadata"]["annotations"] = {}
        assert data["ingressSpec"] == {"metadata": {}}

    def test_to_dict_omits_unset(self):
        app = KubernetesApplication(name="svc", ns="sdm", workspace_id="T1")
        assert app.to_dict() == {"name": "svc", "ns": "sdm", "workspaceId": "T1"}

    def test_to_dict_protocol_value(self):
        app = KubernetesApplication(name="svc", protocol=Protocol.HTTP)
        assert app.to_dict()["protocol"] == "http"

    def test_frozen(self):
        app = KubernetesApplication(name="svc")
        with pytest.raises(dataclasses.FrozenInstanceError):
            app.ns = "sdm"


class TestAugmentedApplication:
    def test_is_not_a_descriptor(self):
        augmented = AugmentedApplication(KubernetesApplication(name="svc", ns="sdm"))
        assert not isinstance(augmented, KubernetesApplication)
        assert augmented.name == "svc"
        assert augmented.ns == "sdm"
        assert augmented.to_dict() == {"name": "svc", "ns": "sdm"}


class TestKubernetesDeployGoal:
    def test_from_dict(self):
        goal = KubernetesDeployGoal.from_dict({
            "sdm": {
                "configuration": {
                    "name": "myapp",
                    "apiKey": "k",
                    "environment": "prod",
                    "sdm": {"build": {"docker": True}},
                },
            },
            "details": {"environment": "staging"},
        })
        assert goal.configuration.name == "myapp"
        assert goal.configuration.api_key == "k"
        assert goal.configuration.build == {"docker": True}
        assert goal.details.environment == "staging"

    def test_cluster_label_prefers_context(self):
        goal = KubernetesDeployGoal(
            configuration=SdmConfiguration(name="myapp", environment="prod"),
            details=GoalDetails(environment="staging"),
        )
        assert goal.cluster_label("minikube") == "minikube"

    def test_cluster_label_goal_environment_before_sdm_environment(self):
        goal = KubernetesDeployGoal(
            configuration=SdmConfiguration(name="myapp", environment="prod"),
            details=GoalDetails(environment="staging"),
        )
        assert goal.cluster_label("") == "staging"

    def test_cluster_label_sdm_environment(self):
        goal = KubernetesDeployGoal(configuration=SdmConfiguration(name="myapp", environment="prod"))
        assert goal.cluster_label(None) == "prod"

    def test_cluster_label_empty(self):
        goal = KubernetesDeployGoal(configuration=SdmConfiguration(name="myapp"))
        assert goal.cluster_label("") is None


class TestRuntimeConfiguration:
    def test_to_dict(self):
        config = RuntimeConfiguration(
            name="myapp_prod",
            api_key="k",
            workspace_ids=["T1"],
            environment="prod",
        )
        assert config.to_dict() == {
            "name": "myapp_prod",
            "apiKey": "k",
            "workspaceIds": ["T1"],
            "environment": "prod",
            "cluster": {"workers": 2},
        }

    def test_to_dict_without_environment(self):
        config = RuntimeConfiguration(name="myapp_undefined", api_key="k", workspace_ids=["T1"])
        assert "environment" not in config.to_dict()

    def test_to_dict_without_api_key(self):
        config = RuntimeConfiguration(name="myapp_prod", api_key=None, workspace_ids=["T1"])
        assert config.to_dict() == {
            "name": "myapp_prod",
            "workspaceIds": ["T1"],
            "cluster": {"workers": 2},
        }

    def test_from_dict(self):
        config = RuntimeConfiguration.from_dict({
            "name": "myapp_prod",
            "apiKey": "k",
            "workspaceIds": ["T1"],
            "cluster": {"workers": 4},
        })
        assert config.workspace_ids == ["T1"]
        assert config.cluster_workers == 4


class TestBootstrapConfig:
    def test_default_values(self):
        config = BootstrapConfig()
        assert config.name == "k8s-sdm"
        assert config.namespace == "sdm"
        assert config.port == 2866
        assert config.resources.memory_limit == "384Mi"
        assert config.liveness.path == "/health"

    def test_from_dict(self):
        config = BootstrapConfig.from_dict({
            "image": "atomist/k8s-sdm:1.0.4",
            "resources": {"memory": "512Mi"},
            "probes": {"liveness": {"initial_delay": 60}},
        })
        assert config.image == "atomist/k8s-sdm:1.0.4"
        assert config.resources.memory == "512Mi"
        assert config.resources.cpu == "100m"
        assert config.liveness.initial_delay == 60
        assert config.readiness.initial_delay == 20

    def test_labels(self):
        labels = BootstrapConfig().labels
        assert labels["app.kubernetes.io/name"] == "k8s-sdm"
        assert labels["app.kubernetes.io/managed-by"] == "atomist"


class TestResourcesConfig:
    def test_from_dict_empty(self):
        config = ResourcesConfig.from_dict(None)
        assert config.memory == "320Mi"
        assert config.cpu_limit == "500m"
