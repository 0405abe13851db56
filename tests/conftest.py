from unittest.mock import MagicMock

import pytest
from kubernetes import utils
from kubernetes.client import ApiException


DEFAULT_CONSOLE_CONFIG = b"""apiVersion: webconsole.config.openshift.io/v1
kind: WebConsoleConfiguration
clusterInfo:
  consolePublicURL: ""
  loggingPublicURL: https://logging.default:443
  masterPublicURL: ""
  metricsPublicURL: https://metrics.default:443
features:
  inactivityTimeoutMinutes: 0
servingInfo:
  bindAddress: 0.0.0.0:8443
  namedCertificates: null
"""

INSTALL_TEMPLATE = """apiVersion: v1
kind: ConfigMap
metadata:
  name: webconsole-config
data:
  webconsole-config.yaml: |
{{ api_server_config | indent(4, true) }}
---
apiVersion: apps/v1
kind: Deployment
metadata:
  name: webconsole
  namespace: {{ namespace }}
spec:
  template:
    spec:
      containers:
        - name: webconsole
          image: "{{ image }}"
          command: ["/usr/bin/origin-web-console", "-v={{ log_level }}"]
"""


class FakeKubernetesClient:
    """In-memory stand-in for KubernetesClient keyed by namespace/kind/name."""

    def __init__(self):
        self.namespaces: set[str] = set()
        self.objects: dict[tuple[str, str, str], dict] = {}
        self.ready_replicas: dict[tuple[str, str], int] = {}
        self.create_calls = 0

    def create_namespace(self, namespace: str):
        if namespace in self.namespaces:
            raise ApiException(status=409, reason='Conflict')
        self.namespaces.add(namespace)

    def create_object(self, manifest: dict, namespace: str):
        self.create_calls += 1
        namespace = manifest.get('metadata', {}).get('namespace', namespace)
        key = (namespace, manifest['kind'], manifest['metadata']['name'])
        if key in self.objects:
            raise utils.FailToCreateError([ApiException(status=409, reason='Conflict')])
        self.objects[key] = manifest

    def read_deployment(self, name: str, namespace: str):
        if (namespace, 'Deployment', name) not in self.objects:
            return None
        deployment = MagicMock()
        deployment.status.ready_replicas = self.ready_replicas.get((namespace, name))
        return deployment


@pytest.fixture
def fake_client():
    return FakeKubernetesClient()


@pytest.fixture
def templates_dir(tmp_path):
    templates_root = tmp_path / 'templates'
    (templates_root / 'web-console').mkdir(parents=True)
    (templates_root / 'web-console' / 'console-config.yaml').write_bytes(DEFAULT_CONSOLE_CONFIG)
    (templates_root / 'web-console' / 'console-template.yaml').write_text(INSTALL_TEMPLATE)
    return templates_root
