"""Poll-until-ready loop for installed components."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

from tenacity import RetryError, Retrying, retry_if_result, wait_fixed
from typing_extensions import override

from clusteraddons.core.config import READINESS_POLL_INTERVAL_SECONDS, READINESS_TIMEOUT_SECONDS
from clusteraddons.core.exceptions import ReadinessCheckError, ReadinessTimedOutError
from clusteraddons.core.kubernetes.kubernetes_cluster import KubernetesCluster
from clusteraddons.core.utils import setup_logger


class BaseReadinessCheck(ABC):
    """Read-only probe of a component's live status.

    ``evaluate`` returns True once the component is ready and False while it
    is not ready yet. Lookups that can fail transiently, such as a resource
    that is not visible yet, must be reported as False. Anything raised is
    treated as a definitive failure.
    """

    description: str = 'component'

    @abstractmethod
    def evaluate(self) -> bool:
        pass


class DeploymentReadyCheck(BaseReadinessCheck):
    def __init__(self, cluster: KubernetesCluster, name: str, namespace: str, logger: logging.Logger | None = None):
        self._logger = logger or setup_logger('DeploymentReadyCheck')
        self._cluster = cluster
        self.name = name
        self.namespace = namespace
        self.description = f'deployment {namespace}/{name}'

    @override
    def evaluate(self) -> bool:
        self._logger.debug(f'Polling for {self.description} availability')
        ready_replicas = self._cluster.deployment_ready_replicas(self.name, self.namespace)

        if ready_replicas is None:
            return False

        return ready_replicas > 0


class ReadinessPoller:
    """Blocks until a readiness check passes, errors or the timeout elapses.

    The first evaluation happens immediately. The timeout is only checked
    between evaluations, so an evaluation that is already running when it
    expires can still report the component as ready.

    ``sleep`` and ``clock`` are replaced together in tests: the deadline is
    measured on ``clock``, so a fake ``sleep`` has to advance it.

    A poller holds only its settings and can be shared between installs.
    """

    def __init__(self, interval: float = READINESS_POLL_INTERVAL_SECONDS, timeout: float = READINESS_TIMEOUT_SECONDS,
                 sleep: Callable[[float], None] = time.sleep, clock: Callable[[], float] = time.monotonic,
                 logger: logging.Logger | None = None):
        if interval <= 0:
            raise ValueError(f'Poll interval must be positive, got {interval}')
        if timeout < 0:
            raise ValueError(f'Poll timeout must not be negative, got {timeout}')

        self.interval = interval
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock
        self._logger = logger or setup_logger('ReadinessPoller')

    def wait(self, check: BaseReadinessCheck, logger: logging.Logger | None = None) -> int:
        """Poll ``check`` until it reports ready.

        Returns:
            The number of evaluations it took.

        Raises:
            ReadinessTimedOutError: the timeout elapsed without a ready result.
            ReadinessCheckError: the check raised; it is not evaluated again.
        """
        logger = logger or self._logger
        started = self._clock()
        attempts = 0

        def evaluate() -> bool:
            nonlocal attempts
            attempts += 1
            return check.evaluate()

        def deadline_passed(retry_state) -> bool:
            return self._clock() - started >= self.timeout

        logger.info(f'Waiting up to {self.timeout}s for {check.description} to become ready')

        retrying = Retrying(
            retry=retry_if_result(lambda ready: not ready),
            stop=deadline_passed,
            wait=wait_fixed(self.interval),
            sleep=self._sleep,
        )

        try:
            retrying(evaluate)
        except RetryError as e:
            logger.error(f'{check.description} not ready after {attempts} checks')
            raise ReadinessTimedOutError(
                f'{check.description} did not become ready within {self.timeout}s'
            ) from e
        except Exception as e:
            logger.error(f'Readiness check for {check.description} failed: {e}')
            raise ReadinessCheckError(f'readiness check for {check.description} failed') from e

        logger.info(f'{check.description} is ready after {attempts} checks')
        return attempts
