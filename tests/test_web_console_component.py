from unittest.mock import MagicMock

import pytest
import yaml
from kubernetes.client import ApiException
from pydantic import ValidationError

from clusteraddons.core.components.console_config import ConsoleURLOverrides
from clusteraddons.core.components.web_console_component import WebConsoleComponent, WebConsoleSpec, install_web_console
from clusteraddons.core.exceptions import ConfigInvalidError
from clusteraddons.core.install_outcome import InstallOutcome, InstallStage
from clusteraddons.core.kubernetes.credentials import InMemoryCredentials, KubeconfigFileCredentials
from clusteraddons.core.kubernetes.kubernetes_cluster import KubernetesCluster
from clusteraddons.core.kubernetes.readiness import ReadinessPoller
from clusteraddons.core.template_loader import TemplateLoader


NAMESPACE = 'openshift-web-console'


@pytest.fixture
def spec():
    return WebConsoleSpec(
        image_format='openshift/origin-${component}:${version}',
        image_version='v3.10',
        log_level=2,
        urls=ConsoleURLOverrides(public_master_url='https://master:8443', public_console_url='https://console:8443'),
    )


@pytest.fixture
def credentials():
    return InMemoryCredentials(b'apiVersion: v1\nkind: Config\n')


@pytest.fixture
def make_component(templates_dir, fake_client):
    def _make(spec, timeout=60.0):
        return WebConsoleComponent(
            spec,
            assets=TemplateLoader(templates_dir=templates_dir),
            poller=ReadinessPoller(interval=1, timeout=timeout, sleep=MagicMock()),
            cluster_factory=lambda kubeconfig, logger: KubernetesCluster(fake_client, logger),
        )

    return _make


class TestWebConsoleSpec:
    def test_defaults(self, spec):
        assert spec.name == 'webconsole'
        assert spec.namespace == NAMESPACE
        assert spec.image_component == 'web-console'

    def test_spec_is_immutable(self, spec):
        with pytest.raises(ValidationError):
            spec.namespace = 'other'


class TestBuildParams:
    def test_params(self, spec, make_component):
        params = make_component(spec).build_params()

        assert set(params) == {'api_server_config', 'image', 'log_level', 'namespace'}
        assert params['image'] == 'openshift/origin-web-console:v3.10'
        assert params['log_level'] == '2'
        assert params['namespace'] == NAMESPACE

        cluster_info = yaml.safe_load(params['api_server_config'])['clusterInfo']
        assert cluster_info['consolePublicURL'] == 'https://console:8443/'
        assert cluster_info['masterPublicURL'] == 'https://master:8443'
        assert cluster_info['loggingPublicURL'] == 'https://logging.default:443'

    def test_packaged_assets(self, spec):
        params = WebConsoleComponent(spec).build_params()

        assert yaml.safe_load(params['api_server_config'])['clusterInfo']['masterPublicURL'] == 'https://master:8443'

    def test_bad_image_format(self, spec, make_component):
        component = make_component(spec.model_copy(update={'image_format': 'origin-${registry}'}))

        with pytest.raises(ConfigInvalidError, match='cannot resolve image'):
            component.build_params()


class TestInstall:
    def test_succeeded(self, spec, make_component, credentials, fake_client):
        fake_client.ready_replicas[(NAMESPACE, 'webconsole')] = 1

        result = make_component(spec).install(credentials)

        assert result.ok
        assert result.outcome == InstallOutcome.SUCCEEDED
        assert result.error is None
        assert result.resources == ['ConfigMap/webconsole-config', 'Deployment/webconsole']

        config_map = fake_client.objects[(NAMESPACE, 'ConfigMap', 'webconsole-config')]
        rendered_config = yaml.safe_load(config_map['data']['webconsole-config.yaml'])
        assert rendered_config['clusterInfo']['consolePublicURL'] == 'https://console:8443/'

    def test_reinstall_succeeds(self, spec, make_component, credentials, fake_client):
        fake_client.ready_replicas[(NAMESPACE, 'webconsole')] = 1
        make_component(spec).install(credentials)
        objects_after_first = dict(fake_client.objects)

        result = make_component(spec).install(credentials)

        assert result.ok
        assert fake_client.objects == objects_after_first

    def test_credentials_unavailable(self, spec, make_component, tmp_path, fake_client):
        result = make_component(spec).install(KubeconfigFileCredentials(tmp_path / 'missing'))

        assert result.outcome == InstallOutcome.CREDENTIALS_UNAVAILABLE
        assert result.error.stage == InstallStage.CREDENTIALS
        assert isinstance(result.error.__cause__, FileNotFoundError)
        assert fake_client.create_calls == 0

    def test_malformed_kubeconfig(self, spec, templates_dir):
        component = WebConsoleComponent(spec, assets=TemplateLoader(templates_dir=templates_dir))

        result = component.install(InMemoryCredentials(b'clusters: [unclosed'))

        assert result.outcome == InstallOutcome.CREDENTIALS_UNAVAILABLE
        assert 'cannot obtain API clients' in str(result.error)

    def test_config_invalid(self, spec, make_component, credentials, templates_dir, fake_client):
        (templates_dir / 'web-console' / 'console-config.yaml').write_text('kind: WebConsoleConfiguration\n')

        result = make_component(spec).install(credentials)

        assert result.outcome == InstallOutcome.CONFIG_INVALID
        assert 'missing clusterInfo' in str(result.error)
        assert not result.retryable
        assert fake_client.create_calls == 0

    def test_missing_install_template(self, spec, make_component, credentials, templates_dir):
        (templates_dir / 'web-console' / 'console-template.yaml').unlink()

        result = make_component(spec).install(credentials)

        assert result.outcome == InstallOutcome.CONFIG_INVALID

    def test_submission_failed(self, spec, make_component, credentials, templates_dir, fake_client):
        (templates_dir / 'web-console' / 'console-template.yaml').write_text(
            'apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: {{ config_map_name }}\n'
        )

        result = make_component(spec).install(credentials)

        assert result.outcome == InstallOutcome.SUBMISSION_FAILED
        assert 'unresolved parameter' in str(result.error)
        assert not result.retryable
        assert fake_client.objects == {}

    def test_readiness_timed_out(self, spec, make_component, credentials, fake_client):
        fake_client.ready_replicas[(NAMESPACE, 'webconsole')] = 0

        result = make_component(spec, timeout=0).install(credentials)

        assert result.outcome == InstallOutcome.READINESS_TIMED_OUT
        assert result.retryable
        assert result.resources == ['ConfigMap/webconsole-config', 'Deployment/webconsole']

    def test_readiness_check_errored(self, spec, make_component, credentials, fake_client):
        fake_client.read_deployment = MagicMock(side_effect=ApiException(status=403, reason='Forbidden'))

        result = make_component(spec).install(credentials)

        assert result.outcome == InstallOutcome.READINESS_CHECK_ERRORED
        assert isinstance(result.error.__cause__, ApiException)
        fake_client.read_deployment.assert_called_once_with('webconsole', NAMESPACE)

    def test_progress_goes_to_injected_logger(self, spec, credentials, templates_dir, fake_client):
        fake_client.ready_replicas[(NAMESPACE, 'webconsole')] = 1
        logger = MagicMock()

        install_web_console(
            spec, credentials, logger,
            assets=TemplateLoader(templates_dir=templates_dir),
            cluster_factory=lambda kubeconfig, logger: KubernetesCluster(fake_client, logger),
            poller=ReadinessPoller(interval=1, timeout=1, sleep=MagicMock()),
        )

        messages = [call.args[0] for call in logger.info.call_args_list]
        assert messages == [
            f'Installing webconsole into namespace {NAMESPACE}',
            f'Submitting 2 resources to namespace {NAMESPACE}',
            f'Namespace {NAMESPACE} created',
            f'{NAMESPACE}/ConfigMap/webconsole-config created',
            f'{NAMESPACE}/Deployment/webconsole created',
            'Submitted ConfigMap/webconsole-config, Deployment/webconsole',
            f'Waiting up to 1s for deployment {NAMESPACE}/webconsole to become ready',
            f'deployment {NAMESPACE}/webconsole is ready after 1 checks',
            'webconsole installed and ready',
        ]
        logger.debug.assert_any_call(f'Polling for deployment {NAMESPACE}/webconsole availability')

    def test_result_to_dict(self, spec, make_component, credentials, templates_dir):
        (templates_dir / 'web-console' / 'console-config.yaml').write_text('kind: WebConsoleConfiguration\n')

        result = make_component(spec).install(credentials).to_dict()

        assert result['component'] == 'webconsole'
        assert result['outcome'] == 'config_invalid'
        assert 'missing clusterInfo' in result['error']
