import json
import logging
from typing import Any

import urllib3
from kubernetes import utils
from kubernetes.client.exceptions import ApiException

from clusteraddons.core.exceptions import NamespaceTerminatingError, SubmissionFailedError
from clusteraddons.core.kubernetes.kubernetes_client import KubernetesClient
from clusteraddons.core.utils import setup_logger


def _manifest_label(manifest: dict[str, Any]) -> str:
    return f"{manifest.get('kind')}/{manifest.get('metadata', {}).get('name')}"


def _is_already_exists(exception: ApiException) -> bool:
    return exception.status == 409


class KubernetesCluster:
    def __init__(self, kubernetes_client: KubernetesClient, logger: logging.Logger | None = None):
        self._logger = logger or setup_logger('KubernetesCluster')
        self._client = kubernetes_client

    @classmethod
    def from_kubeconfig(cls, kubeconfig: bytes, logger: logging.Logger | None = None) -> 'KubernetesCluster':
        return cls(KubernetesClient.from_kubeconfig(kubeconfig), logger)

    def _parse_kubernetes_api_exception(self, exception: ApiException) -> tuple[str, str]:
        original_reason = exception.reason

        self._logger.debug(f'Original reason: {original_reason}')

        try:
            body = json.loads(exception.body)
        except (TypeError, ValueError):
            return original_reason or '', str(exception.body or '')

        return body.get('reason', original_reason or ''), body.get('message', '')

    def create_namespace(self, namespace: str, skip_if_exists: bool = True):
        try:
            self._client.create_namespace(namespace)
            self._logger.info(f'Namespace {namespace} created')
        except ApiException as e:
            reason, message = self._parse_kubernetes_api_exception(e)
            self._logger.debug(f"Reason: {reason}")
            self._logger.debug(f"Body: {message}")
            if reason not in ('AlreadyExists', 'NamespaceTerminating') and not _is_already_exists(e):
                raise

            if "object is being deleted" in message or "is being terminated" in message:
                self._logger.warning(f'Namespace {namespace} is still being deleted')
                raise NamespaceTerminatingError(namespace) from e

            if not skip_if_exists:
                raise

            self._logger.info(f'Namespace {namespace} already exists, skipping creation')

    def apply_manifests(self, manifests: list[dict[str, Any]], namespace: str) -> list[str]:
        """Create every manifest in ``namespace``.

        A resource that already exists under the same name is left as it is
        and counted as applied, so re-running an install is safe. Any other
        failure stops the submission.

        Returns:
            ``Kind/name`` labels of the submitted resources, suffixed with
            ``(exists)`` where the resource was already present.
        """
        applied = []

        for manifest in manifests:
            label = _manifest_label(manifest)
            try:
                self._client.create_object(manifest, namespace)
                self._logger.info(f'{namespace}/{label} created')
                applied.append(label)
            except utils.FailToCreateError as e:
                if all(_is_already_exists(x) for x in e.api_exceptions):
                    # TODO: compare the live object with the manifest once reinstall needs to reconcile changes
                    self._logger.warning(f'{namespace}/{label} already exists, leaving it in place')
                    applied.append(f'{label} (exists)')
                    continue
                raise SubmissionFailedError(f'cannot create {label} in namespace {namespace}') from e
            except ApiException as e:
                if _is_already_exists(e):
                    self._logger.warning(f'{namespace}/{label} already exists, leaving it in place')
                    applied.append(f'{label} (exists)')
                    continue
                raise SubmissionFailedError(f'cannot create {label} in namespace {namespace}') from e
            except urllib3.exceptions.HTTPError as e:
                raise SubmissionFailedError(f'cannot reach cluster while creating {label}') from e
            except AttributeError as e:
                # the kubernetes client has no API class for this apiVersion/kind
                raise SubmissionFailedError(f'unsupported resource {label}') from e

        return applied

    def deployment_ready_replicas(self, name: str, namespace: str) -> int | None:
        deployment = self._client.read_deployment(name, namespace)

        if deployment is None:
            return None

        if deployment.status is None:
            return 0

        return deployment.status.ready_replicas or 0
