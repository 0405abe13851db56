from __future__ import annotations

from dataclasses import dataclass, field

from clusteraddons.core.exceptions import InstallError
from clusteraddons.core.install_outcome import InstallOutcome


_RETRYABLE_OUTCOMES = (InstallOutcome.READINESS_TIMED_OUT, InstallOutcome.READINESS_CHECK_ERRORED)


@dataclass(frozen=True)
class InstallResult:
    component: str
    outcome: InstallOutcome
    error: InstallError | None = None
    resources: list[str] = field(default_factory=list)

    @classmethod
    def succeeded(cls, component: str, resources: list[str] | None = None) -> InstallResult:
        return cls(component=component, outcome=InstallOutcome.SUCCEEDED, resources=resources or [])

    @classmethod
    def failed(cls, component: str, error: InstallError, resources: list[str] | None = None) -> InstallResult:
        return cls(component=component, outcome=error.outcome, error=error, resources=resources or [])

    @property
    def ok(self) -> bool:
        return self.outcome == InstallOutcome.SUCCEEDED

    @property
    def retryable(self) -> bool:
        # the cluster never became healthy; input, template and credential failures will fail again
        return self.outcome in _RETRYABLE_OUTCOMES

    def to_dict(self) -> dict:
        return {
            "component": self.component,
            "outcome": self.outcome,
            "error": str(self.error) if self.error else None,
            "resources": list(self.resources),
        }
