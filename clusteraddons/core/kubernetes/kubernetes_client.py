from typing import Any

import urllib3
import yaml
from kubernetes import client, config, utils
from kubernetes.client import ApiException
from kubernetes.config.config_exception import ConfigException

from clusteraddons.core.exceptions import CredentialsUnavailableError
from clusteraddons.core.utils import setup_logger

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class KubernetesClients:
    def __init__(self, api_client: client.ApiClient):
        self.api = api_client
        self.core = client.CoreV1Api(api_client)  # Namespaces, ConfigMaps, Services
        self.apps = client.AppsV1Api(api_client)  # Deployments


class KubernetesClient:
    def __init__(self, api_client: client.ApiClient):
        self._logger = setup_logger('KubernetesClient')
        self._clients = KubernetesClients(api_client)

    @classmethod
    def from_kubeconfig(cls, kubeconfig: bytes) -> 'KubernetesClient':
        try:
            config_dict = yaml.safe_load(kubeconfig)
        except yaml.YAMLError as e:
            raise CredentialsUnavailableError('cannot obtain API clients') from e

        if not isinstance(config_dict, dict):
            raise CredentialsUnavailableError('cannot obtain API clients: kubeconfig is not a mapping')

        try:
            api_client = config.new_client_from_config_dict(config_dict)
        except (ConfigException, KeyError, TypeError, ValueError) as e:
            raise CredentialsUnavailableError('cannot obtain API clients') from e

        return cls(api_client)

    def create_namespace(self, namespace: str):
        self._clients.core.create_namespace(client.V1Namespace(metadata=client.V1ObjectMeta(name=namespace)))

    def create_object(self, manifest: dict[str, Any], namespace: str):
        self._logger.debug(f"Creating {manifest.get('kind')} {manifest.get('metadata', {}).get('name')} in {namespace}")
        utils.create_from_dict(self._clients.api, manifest, namespace=namespace)

    def read_deployment(self, name: str, namespace: str) -> client.V1Deployment | None:
        try:
            return self._clients.apps.read_namespaced_deployment(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                self._logger.debug(f"Deployment '{name}' not found in namespace '{namespace}'")
                return None
            raise
