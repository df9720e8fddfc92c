"""Self-healing engine.

Runs a command and, while it fails, drives one bounded retry loop:
1. Execute the original command
2. Classify the failure
3. Resolve a candidate fix (rule table, then suggestion backend)
4. Gate it: block list, then operator confirmation
5. Apply it, then retry the original command or finish

Every state change is recorded as a HealingStep, handed to observers and
logged, in the order detect, execute, classify, propose, confirm, apply,
then retry or a terminal succeeded/failed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import NoReturn

from autofix.backends.base import SuggestionBackend
from autofix.core.config import SafetySettings
from autofix.core.constants import MAX_RETRIES
from autofix.core.environment import EnvironmentSnapshot
from autofix.core.errors import ClassifiedFailure, FailureClassifier
from autofix.core.logging import RunContext, get_logger, with_context
from autofix.execution.models import ExecutionResult
from autofix.execution.runner import CommandRunner
from autofix.healing.remedies.base import FixKind, RemediationCandidate
from autofix.healing.resolver import RemediationResolver
from autofix.healing.safety import SafetyValidator, ValidationVerdict, is_sudo_command

_logger = get_logger("engine")


class HealingStatus(str, Enum):
    """Observable engine states."""

    DETECT = "detect"
    EXECUTE = "execute"
    CLASSIFY = "classify"
    PROPOSE = "propose"
    CONFIRM = "confirm"
    APPLY = "apply"
    RETRY = "retry"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (HealingStatus.SUCCEEDED, HealingStatus.FAILED)


class FailureReason(str, Enum):
    """Why a run ended without success."""

    BLOCKED = "blocked"
    NO_FIX = "no_fix"
    FIX_BLOCKED = "fix_blocked"
    DECLINED = "declined"
    SUDO_DECLINED = "sudo_declined"
    FIX_FAILED = "fix_failed"
    MAX_RETRIES = "max_retries"


_REASON_MESSAGES: dict[FailureReason, str] = {
    FailureReason.BLOCKED: "command blocked by safety policy",
    FailureReason.NO_FIX: "no fix available",
    FailureReason.FIX_BLOCKED: "fix blocked by safety policy",
    FailureReason.DECLINED: "declined by user",
    FailureReason.SUDO_DECLINED: "sudo command declined",
    FailureReason.FIX_FAILED: "fix command failed",
    FailureReason.MAX_RETRIES: "max retries exceeded",
}


@dataclass(frozen=True)
class HealingStep:
    """One observable transition of a healing run."""

    status: HealingStatus
    attempt: int
    message: str = ""
    command: str | None = None
    result: ExecutionResult | None = None
    failure: ClassifiedFailure | None = None
    candidate: RemediationCandidate | None = None


@dataclass
class HealingOutcome:
    """Terminal result of a healing run.

    Captures how the run ended, the last execution result and every step
    taken along the way.
    """

    status: HealingStatus
    """SUCCEEDED or FAILED."""

    reason: FailureReason | None = None
    """Why the run failed (None on success)."""

    message: str = ""
    """Human-readable summary."""

    result: ExecutionResult | None = None
    """Final result: the original command's, or the fix's for a replacement
    success or a failed fix."""

    attempts: int = 0
    """How many times the original command was executed."""

    steps: list[HealingStep] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == HealingStatus.SUCCEEDED

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 on success, else the final command's code."""
        if self.success:
            return 0
        if self.result is None or self.result.exit_code == 0:
            return 1
        return self.result.exit_code

    @property
    def fixes_applied(self) -> list[RemediationCandidate]:
        return [
            step.candidate
            for step in self.steps
            if step.status == HealingStatus.APPLY and step.candidate is not None
        ]

    def format(self) -> str:
        """One-paragraph summary for logs and the CLI."""
        lines = [f"Status: {self.status.value}"]
        if self.reason is not None:
            lines.append(f"Reason: {self.reason.value}")
        if self.message:
            lines.append(f"Message: {self.message}")
        lines.append(f"Attempts: {self.attempts}")
        fixes = self.fixes_applied
        if fixes:
            lines.append("Fixes applied:")
            lines.extend(f"  - {fix}" for fix in fixes)
        lines.append(f"Exit code: {self.exit_code}")
        return "\n".join(lines)


ConfirmCallback = Callable[[str], bool]
StepObserver = Callable[[HealingStep], None]


def prompt_confirm(question: str) -> bool:
    """Ask the operator a yes/no question; anything but yes declines."""
    from rich.prompt import Confirm

    return Confirm.ask(question, default=False)


class _Terminated(Exception):
    """Internal signal carrying a terminal outcome out of the loop body."""

    def __init__(self, outcome: HealingOutcome) -> None:
        super().__init__(outcome.message)
        self.outcome = outcome


class SelfHealingEngine:
    """Runs a command and heals it with a bounded retry loop.

    The engine owns its attempt counter; settings are an immutable
    snapshot taken before the run starts.

    Example:
        engine = SelfHealingEngine(
            environment=detect_environment(),
            backend=create_backend(config.llm),
            settings=config.snapshot(),
        )
        outcome = engine.run("gcc foo.c")
        sys.exit(outcome.exit_code)
    """

    def __init__(
        self,
        environment: EnvironmentSnapshot,
        backend: SuggestionBackend,
        settings: SafetySettings | None = None,
        runner: CommandRunner | None = None,
        validator: SafetyValidator | None = None,
        classifier: FailureClassifier | None = None,
        confirm: ConfirmCallback | None = None,
        observers: Sequence[StepObserver] = (),
        max_retries: int = MAX_RETRIES,
    ) -> None:
        """Initialize the engine.

        Args:
            environment: Host snapshot used for rule-table fixes and prompts.
            backend: Suggestion backend for failures the table cannot fix.
            settings: Confirmation policy snapshot.
            runner: Command runner (default honors settings' command timeout).
            validator: Safety validator.
            classifier: Failure classifier.
            confirm: Yes/no prompt; defaults to a rich Confirm prompt.
            observers: Callables notified of every HealingStep.
            max_retries: Highest 0-based attempt index.
        """
        self.environment = environment
        self.backend = backend
        self.settings = settings or SafetySettings()
        self.runner = runner or CommandRunner(
            timeout_seconds=self.settings.command_timeout_seconds
        )
        self.validator = validator or SafetyValidator()
        self.classifier = classifier or FailureClassifier()
        self.resolver = RemediationResolver(environment, backend, self.validator)
        self.confirm = confirm or prompt_confirm
        self.observers = list(observers)
        self.max_retries = max_retries

    def run(self, command: str) -> HealingOutcome:
        """Run ``command``, healing failures until success or a terminal state.

        Raises:
            ProcessSpawnError: If the runner cannot spawn any process.
        """
        ctx = RunContext(command=command)
        with with_context(ctx):
            steps: list[HealingStep] = []
            try:
                outcome = self._run(command, ctx, steps)
            except _Terminated as terminated:
                outcome = terminated.outcome

            _logger.info(
                "run_finished",
                status=outcome.status.value,
                reason=outcome.reason.value if outcome.reason else None,
                attempts=outcome.attempts,
                exit_code=outcome.exit_code,
            )
            return outcome

    def _run(self, command: str, ctx: RunContext, steps: list[HealingStep]) -> HealingOutcome:
        env = self.environment
        self._emit(
            steps,
            HealingStatus.DETECT,
            0,
            f"{env.os.value} {env.os_version} ({env.architecture.value}, "
            f"package manager: {env.package_manager.value})",
        )

        verdict = self.validator.validate(command)
        if verdict.blocked:
            self._fail(steps, FailureReason.BLOCKED, 0, verdict.reason, None, 0)
        if verdict.requires_confirmation and not self.settings.auto_execute:
            self._emit(steps, HealingStatus.CONFIRM, 0, command, command=command)
            if not self.confirm(f"{verdict.reason}. Execute this command?"):
                self._fail(steps, FailureReason.DECLINED, 0, None, None, 0)

        result: ExecutionResult | None = None
        for attempt in range(self.max_retries + 1):
            with with_context(ctx.with_attempt(attempt)):
                if attempt > 0:
                    self._emit(
                        steps,
                        HealingStatus.RETRY,
                        attempt,
                        f"Retry {attempt}/{self.max_retries}",
                        command=command,
                    )

                self._emit(steps, HealingStatus.EXECUTE, attempt, command, command=command)
                result = self.runner.run(command)
                runs = attempt + 1

                if result.success:
                    return self._succeed(steps, attempt, result, runs)

                if attempt >= self.max_retries:
                    self._fail(steps, FailureReason.MAX_RETRIES, attempt, None, result, runs)

                candidate = self._propose(command, result, attempt, runs, steps)

                self._gate(candidate, attempt, result, runs, steps)

                self._emit(
                    steps,
                    HealingStatus.APPLY,
                    attempt,
                    candidate.command,
                    command=candidate.command,
                    candidate=candidate,
                )
                fix_result = self.runner.run(candidate.command)
                if not fix_result.success:
                    self._fail(
                        steps,
                        FailureReason.FIX_FAILED,
                        attempt,
                        fix_result.stderr.strip() or None,
                        fix_result,
                        runs,
                    )

                if candidate.kind == FixKind.REPLACEMENT:
                    return self._succeed(steps, attempt, fix_result, runs)

        # Loop always terminates inside: success, or failure at the last attempt
        raise AssertionError("retry loop exited without an outcome")

    def _propose(
        self,
        command: str,
        result: ExecutionResult,
        attempt: int,
        runs: int,
        steps: list[HealingStep],
    ) -> RemediationCandidate:
        failure = self.classifier.classify(result.stderr, result.exit_code)
        self._emit(
            steps,
            HealingStatus.CLASSIFY,
            attempt,
            failure.message,
            result=result,
            failure=failure,
        )

        resolution = self.resolver.resolve(
            failure, command, result.stderr, result.exit_code, attempt
        )
        if resolution.candidate is None:
            self._fail(steps, FailureReason.NO_FIX, attempt, resolution.note, result, runs)

        candidate = resolution.candidate
        self._emit(
            steps,
            HealingStatus.PROPOSE,
            attempt,
            candidate.explanation or str(candidate),
            command=candidate.command,
            failure=failure,
            candidate=candidate,
        )
        return candidate

    def _gate(
        self,
        candidate: RemediationCandidate,
        attempt: int,
        result: ExecutionResult,
        runs: int,
        steps: list[HealingStep],
    ) -> None:
        """Raise _Terminated unless the candidate may run."""
        verdict = self.validator.validate(candidate.command)
        if verdict.blocked:
            self._fail(steps, FailureReason.FIX_BLOCKED, attempt, verdict.reason, result, runs)

        if self.settings.auto_execute:
            self._emit(
                steps,
                HealingStatus.CONFIRM,
                attempt,
                "auto-approved",
                command=candidate.command,
                candidate=candidate,
            )
            return

        self._emit(
            steps,
            HealingStatus.CONFIRM,
            attempt,
            candidate.command,
            command=candidate.command,
            candidate=candidate,
        )
        if not self.confirm(self._question(candidate, verdict)):
            self._fail(steps, FailureReason.DECLINED, attempt, None, result, runs)

        if self.settings.require_sudo_confirm and is_sudo_command(candidate.command):
            if not self.confirm("This command requires sudo. Execute?"):
                self._fail(steps, FailureReason.SUDO_DECLINED, attempt, None, result, runs)

    @staticmethod
    def _question(candidate: RemediationCandidate, verdict: ValidationVerdict) -> str:
        question = f"Execute this fix ({candidate.risk_level.value} risk)?"
        if verdict.requires_confirmation and verdict.reason:
            question = f"{verdict.reason}. {question}"
        return question

    def _emit(
        self,
        steps: list[HealingStep],
        status: HealingStatus,
        attempt: int,
        message: str = "",
        *,
        command: str | None = None,
        result: ExecutionResult | None = None,
        failure: ClassifiedFailure | None = None,
        candidate: RemediationCandidate | None = None,
    ) -> HealingStep:
        step = HealingStep(
            status=status,
            attempt=attempt,
            message=message,
            command=command,
            result=result,
            failure=failure,
            candidate=candidate,
        )
        steps.append(step)
        _logger.info(f"engine.{status.value}", message=message)
        for observer in self.observers:
            observer(step)
        return step

    def _succeed(
        self,
        steps: list[HealingStep],
        attempt: int,
        result: ExecutionResult,
        runs: int,
    ) -> HealingOutcome:
        self._emit(steps, HealingStatus.SUCCEEDED, attempt, "command succeeded", result=result)
        return HealingOutcome(
            status=HealingStatus.SUCCEEDED,
            message="command succeeded",
            result=result,
            attempts=runs,
            steps=steps,
        )

    def _fail(
        self,
        steps: list[HealingStep],
        reason: FailureReason,
        attempt: int,
        detail: str | None,
        result: ExecutionResult | None,
        runs: int,
    ) -> NoReturn:
        """Record a terminal failure and raise _Terminated."""
        message = _REASON_MESSAGES[reason]
        if detail:
            message = f"{message}: {detail}"
        self._emit(steps, HealingStatus.FAILED, attempt, message, result=result)
        raise _Terminated(
            HealingOutcome(
                status=HealingStatus.FAILED,
                reason=reason,
                message=message,
                result=result,
                attempts=runs,
                steps=steps,
            )
        )
