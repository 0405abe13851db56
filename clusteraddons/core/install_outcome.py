from enum import StrEnum


class InstallOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    CONFIG_INVALID = "config_invalid"
    CREDENTIALS_UNAVAILABLE = "credentials_unavailable"
    SUBMISSION_FAILED = "submission_failed"
    READINESS_TIMED_OUT = "readiness_timed_out"
    READINESS_CHECK_ERRORED = "readiness_check_errored"


class InstallStage(StrEnum):
    CREDENTIALS = "credentials"
    CONFIG = "config"
    SUBMISSION = "submission"
    READINESS = "readiness"
