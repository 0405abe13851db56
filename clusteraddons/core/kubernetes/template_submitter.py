import logging
from typing import Any

import urllib3
import yaml
from jinja2.exceptions import TemplateError
from kubernetes.client.exceptions import ApiException

from clusteraddons.core.exceptions import NamespaceTerminatingError, SubmissionFailedError
from clusteraddons.core.kubernetes.kubernetes_cluster import KubernetesCluster
from clusteraddons.core.template_loader import MissingTemplateValuesError, TemplateLoader, template_loader
from clusteraddons.core.utils import setup_logger


class TemplateSubmitter:
    def __init__(self, cluster: KubernetesCluster, loader: TemplateLoader = template_loader,
                 logger: logging.Logger | None = None):
        self._logger = logger or setup_logger('TemplateSubmitter')
        self._cluster = cluster
        self._loader = loader

    def render_manifests(self, template_source: str, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            rendered = self._loader.render(template_source, params)
        except MissingTemplateValuesError as e:
            raise SubmissionFailedError('unresolved parameter') from e
        except TemplateError as e:
            raise SubmissionFailedError('cannot render install template') from e

        try:
            documents = [x for x in yaml.safe_load_all(rendered) if x is not None]
        except yaml.YAMLError as e:
            raise SubmissionFailedError('rendered install template is not valid YAML') from e

        for document in documents:
            if not isinstance(document, dict) or 'kind' not in document or 'apiVersion' not in document:
                raise SubmissionFailedError(f'rendered install template contains an invalid resource: {document!r}')

        return documents

    def submit(self, template_source: str, params: dict[str, str], namespace: str) -> list[str]:
        manifests = self.render_manifests(template_source, params)

        self._logger.info(f'Submitting {len(manifests)} resources to namespace {namespace}')

        try:
            self._cluster.create_namespace(namespace)
        except (ApiException, NamespaceTerminatingError, urllib3.exceptions.HTTPError) as e:
            raise SubmissionFailedError(f'cannot create namespace {namespace}') from e

        return self._cluster.apply_manifests(manifests, namespace)
