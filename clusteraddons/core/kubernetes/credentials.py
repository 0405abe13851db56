from abc import ABC, abstractmethod
from pathlib import Path

from clusteraddons.core.config import ADMIN_KUBECONFIG_NAME
from clusteraddons.core.exceptions import CredentialsUnavailableError


class BaseCredentialsSource(ABC):
    @abstractmethod
    def get_kubeconfig(self) -> bytes:
        pass


class KubeconfigFileCredentials(BaseCredentialsSource):
    """Reads the cluster-admin kubeconfig written next to the master config."""

    def __init__(self, master_config_dir: Path, file_name: str = ADMIN_KUBECONFIG_NAME):
        self.kubeconfig_path = Path(master_config_dir) / file_name

    def get_kubeconfig(self) -> bytes:
        try:
            return self.kubeconfig_path.read_bytes()
        except OSError as e:
            raise CredentialsUnavailableError(f'cannot read kubeconfig {self.kubeconfig_path}') from e


class InMemoryCredentials(BaseCredentialsSource):
    def __init__(self, kubeconfig: bytes):
        self._kubeconfig = kubeconfig

    def get_kubeconfig(self) -> bytes:
        return self._kubeconfig
