import logging
from typing_extensions import override

from clusteraddons.core.components.base_component import BaseComponent, ComponentSpec
from clusteraddons.core.components.console_config import ConsoleURLOverrides, patch_console_config
from clusteraddons.core.install_result import InstallResult
from clusteraddons.core.kubernetes.credentials import BaseCredentialsSource
from clusteraddons.core.kubernetes.kubernetes_cluster import KubernetesCluster
from clusteraddons.core.kubernetes.readiness import BaseReadinessCheck, DeploymentReadyCheck
from clusteraddons.core.utils import setup_logger


CONSOLE_NAMESPACE = 'openshift-web-console'
CONSOLE_CONFIG_ASSET = 'console-config.yaml'


class WebConsoleSpec(ComponentSpec):
    name: str = 'webconsole'
    namespace: str = CONSOLE_NAMESPACE
    image_component: str = 'web-console'
    install_template: str = 'console-template.yaml'
    template_module: str | None = 'web-console'
    urls: ConsoleURLOverrides


class WebConsoleComponent(BaseComponent):
    spec: WebConsoleSpec

    def __init__(self, spec: WebConsoleSpec, **kwargs):
        self._logger = setup_logger('WebConsoleComponent')
        super().__init__(spec, **kwargs)

    @override
    def build_params(self) -> dict[str, str]:
        console_config = patch_console_config(self.load_asset(CONSOLE_CONFIG_ASSET), self.spec.urls)
        self._logger.debug(f'Console public URL set to {console_config.console_public_url}')

        return {
            'api_server_config': console_config.to_yaml(),
            'image': self.resolve_image(),
            'log_level': str(self.spec.log_level),
            'namespace': self.spec.namespace,
        }

    @override
    def readiness_check(self, cluster: KubernetesCluster, logger: logging.Logger) -> BaseReadinessCheck:
        return DeploymentReadyCheck(cluster, self.spec.name, self.spec.namespace, logger)


def install_web_console(spec: WebConsoleSpec, credentials: BaseCredentialsSource,
                        logger: logging.Logger | None = None, **kwargs) -> InstallResult:
    return WebConsoleComponent(spec, **kwargs).install(credentials, logger)
