from clusteraddons.core.install_outcome import InstallOutcome, InstallStage


class InstallError(Exception):
    """Terminal failure of one installer run.

    The underlying cause is chained with ``raise ... from err`` and is
    available as ``__cause__``.
    """

    stage: InstallStage
    outcome: InstallOutcome

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f'{self.message}: {self.__cause__}'
        return self.message


class CredentialsUnavailableError(InstallError):
    stage = InstallStage.CREDENTIALS
    outcome = InstallOutcome.CREDENTIALS_UNAVAILABLE


class ConfigInvalidError(InstallError):
    stage = InstallStage.CONFIG
    outcome = InstallOutcome.CONFIG_INVALID


class SubmissionFailedError(InstallError):
    stage = InstallStage.SUBMISSION
    outcome = InstallOutcome.SUBMISSION_FAILED


class ReadinessTimedOutError(InstallError):
    stage = InstallStage.READINESS
    outcome = InstallOutcome.READINESS_TIMED_OUT


class ReadinessCheckError(InstallError):
    stage = InstallStage.READINESS
    outcome = InstallOutcome.READINESS_CHECK_ERRORED


class NamespaceTerminatingError(Exception):
    pass
