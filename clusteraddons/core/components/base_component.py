from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from jinja2.exceptions import TemplateNotFound
from pydantic import BaseModel, ConfigDict, Field

from clusteraddons.core.config import IMAGE_FORMAT, IMAGE_VERSION
from clusteraddons.core.exceptions import ConfigInvalidError, InstallError
from clusteraddons.core.components.image_template import ImageTemplate
from clusteraddons.core.install_result import InstallResult
from clusteraddons.core.kubernetes.credentials import BaseCredentialsSource
from clusteraddons.core.kubernetes.kubernetes_cluster import KubernetesCluster
from clusteraddons.core.kubernetes.readiness import BaseReadinessCheck, ReadinessPoller
from clusteraddons.core.kubernetes.template_submitter import TemplateSubmitter
from clusteraddons.core.template_loader import TemplateLoader, template_loader
from clusteraddons.core.utils import setup_logger


class ComponentSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    # display name and name of the resource the readiness check looks at
    name: str = Field(min_length=1)
    namespace: str = Field(pattern=r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
    image_component: str = Field(min_length=1)
    image_format: str = IMAGE_FORMAT
    image_version: str = IMAGE_VERSION
    log_level: int = Field(default=0, ge=0)
    install_template: str
    template_module: str | None = None

    @property
    def image_template(self) -> ImageTemplate:
        return ImageTemplate(format=self.image_format, version=self.image_version)


class BaseComponent(ABC):
    """One installable unit: render its template, submit it, wait for it.

    Subclasses provide the template parameters and the readiness check.
    ``install`` runs the stages in order and stops at the first failure.
    """

    def __init__(self, spec: ComponentSpec, assets: TemplateLoader = template_loader,
                 poller: ReadinessPoller | None = None,
                 cluster_factory: Callable[[bytes, logging.Logger], KubernetesCluster] = KubernetesCluster.from_kubeconfig):
        self.spec = spec
        self._assets = assets
        self._poller = poller
        self._cluster_factory = cluster_factory

    @property
    def name(self) -> str:
        return self.spec.name

    @abstractmethod
    def build_params(self) -> dict[str, str]: ...

    @abstractmethod
    def readiness_check(self, cluster: KubernetesCluster, logger: logging.Logger) -> BaseReadinessCheck: ...

    def resolve_image(self) -> str:
        try:
            return self.spec.image_template.expand(self.spec.image_component)
        except ValueError as e:
            raise ConfigInvalidError(f'cannot resolve image for {self.name}') from e

    def load_asset(self, asset_name: str) -> str:
        try:
            return self._assets.get_asset(asset_name, self.spec.template_module).decode('utf-8')
        except (TemplateNotFound, UnicodeDecodeError, ValueError) as e:
            raise ConfigInvalidError(f'cannot load asset {asset_name} for {self.name}') from e

    def install(self, credentials: BaseCredentialsSource, logger: logging.Logger | None = None) -> InstallResult:
        logger = logger or setup_logger(self.__class__.__name__)
        resources: list[str] = []

        logger.info(f'Installing {self.name} into namespace {self.spec.namespace}')

        try:
            cluster = self._cluster_factory(credentials.get_kubeconfig(), logger)

            params = self.build_params()
            install_template = self.load_asset(self.spec.install_template)

            submitter = TemplateSubmitter(cluster, self._assets, logger)
            resources = submitter.submit(install_template, params, self.spec.namespace)
            logger.info(f'Submitted {", ".join(resources) or "no resources"}')

            poller = self._poller or ReadinessPoller(logger=logger)
            poller.wait(self.readiness_check(cluster, logger), logger)
        except InstallError as e:
            logger.error(f'Installing {self.name} failed at {e.stage} stage: {e}')
            return InstallResult.failed(self.name, e, resources)

        logger.info(f'{self.name} installed and ready')
        return InstallResult.succeeded(self.name, resources)
