from __future__ import annotations

import copy
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from clusteraddons.core.exceptions import ConfigInvalidError


CLUSTER_INFO_KEY = 'clusterInfo'


class ConsoleURLOverrides(BaseModel):
    model_config = ConfigDict(frozen=True)

    public_master_url: str = Field(min_length=1)
    public_console_url: str = Field(min_length=1)
    # empty means "keep whatever the default document has"
    public_logging_url: str = ''
    public_metrics_url: str = ''


class ConsoleConfig:
    """Typed view over the web console configuration document.

    Only the ``clusterInfo`` URLs are exposed; everything else in the
    document is carried through untouched.
    """

    def __init__(self, document: dict[str, Any]):
        self._document = document

    @classmethod
    def from_raw(cls, raw: bytes | str) -> ConsoleConfig:
        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigInvalidError('cannot parse web console config as YAML: not well-formed') from e

        if not isinstance(document, dict):
            raise ConfigInvalidError('cannot parse web console config as YAML: not well-formed')

        return cls(document)

    @property
    def document(self) -> dict[str, Any]:
        return copy.deepcopy(self._document)

    @property
    def cluster_info(self) -> dict[str, Any]:
        cluster_info = self._document.get(CLUSTER_INFO_KEY)

        if not isinstance(cluster_info, dict):
            raise ConfigInvalidError('cannot read clusterInfo in web console config: missing clusterInfo')

        return cluster_info

    def _get(self, key: str) -> str | None:
        return self.cluster_info.get(key)

    def _set(self, key: str, value: str):
        self.cluster_info[key] = value

    @property
    def console_public_url(self) -> str | None:
        return self._get('consolePublicURL')

    @console_public_url.setter
    def console_public_url(self, value: str):
        self._set('consolePublicURL', value)

    @property
    def master_public_url(self) -> str | None:
        return self._get('masterPublicURL')

    @master_public_url.setter
    def master_public_url(self, value: str):
        self._set('masterPublicURL', value)

    @property
    def logging_public_url(self) -> str | None:
        return self._get('loggingPublicURL')

    @logging_public_url.setter
    def logging_public_url(self, value: str):
        self._set('loggingPublicURL', value)

    @property
    def metrics_public_url(self) -> str | None:
        return self._get('metricsPublicURL')

    @metrics_public_url.setter
    def metrics_public_url(self, value: str):
        self._set('metricsPublicURL', value)

    def to_yaml(self) -> str:
        try:
            return yaml.safe_dump(self._document, default_flow_style=False, sort_keys=False)
        except yaml.YAMLError as e:
            raise ConfigInvalidError('cannot serialize web console config') from e


def patch_console_config(raw: bytes | str, overrides: ConsoleURLOverrides) -> ConsoleConfig:
    console_config = ConsoleConfig.from_raw(raw)

    # validate the shape before touching anything
    console_config.cluster_info

    console_config.console_public_url = overrides.public_console_url.rstrip('/') + '/'
    console_config.master_public_url = overrides.public_master_url

    if overrides.public_logging_url:
        console_config.logging_public_url = overrides.public_logging_url
    if overrides.public_metrics_url:
        console_config.metrics_public_url = overrides.public_metrics_url

    return console_config
