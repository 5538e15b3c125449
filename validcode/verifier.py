import asyncio
import random
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from loguru import logger

from .errors import ProxyError, VerificationError
from .executor import NO_TIME, ExecutionProxy
from .schemas import ExecutionRequest, Program, RunSummary, TestCase, VerificationResult
from .summary import summarize


class RunState(str, Enum):
    idle = 'idle'
    running = 'running'
    completed = 'completed'
    cancelled = 'cancelled'


class CancellationToken:
    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def outputs_match(actual: str, expected: str) -> bool:
    return actual.strip() == expected.strip()


def validate_run(program: Program, cases: Sequence[TestCase], method: str = 'manual') -> None:
    if program.is_blank():
        raise VerificationError('Please provide code to verify')

    ids = [c.id for c in cases]
    if len(set(ids)) != len(ids):
        raise VerificationError('Test case ids must be unique')

    if method == 'manual' and any(not c.input.strip() and not c.expected_output.strip() for c in cases):
        raise VerificationError('Please provide input and expected output for all test cases')


class VerificationRun:
    """One program checked against an ordered list of test cases."""

    def __init__(self, program: Program, cases: Sequence[TestCase]):
        self.program = program
        self.cases: Tuple[TestCase, ...] = tuple(cases)
        self.results: List[VerificationResult] = []
        self.state = RunState.idle

    @property
    def summary(self) -> RunSummary:
        return summarize(self.results)

    def request_for(self, case: TestCase) -> ExecutionRequest:
        return ExecutionRequest(
            language=self.program.language,
            files=self.program.source_files(),
            stdin=case.input,
        )


class VerificationOrchestrator:
    """Runs test cases against the executor strictly one after another.

    Cases are never dispatched concurrently: the executor is shared and
    capacity-limited, and results are reported in input order. Between two
    cases the orchestrator pauses for a random interval in ``delay_range``
    (seconds). A failed executor call marks that case as errored and the run
    moves on; nothing is retried.
    """

    def __init__(
        self,
        proxy: ExecutionProxy,
        delay_range: Tuple[float, float] = (0.5, 1.5),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.proxy = proxy
        self.delay_range = delay_range
        self.sleep = sleep

    async def run(
        self,
        program: Program,
        cases: Sequence[TestCase],
        method: str = 'manual',
        token: Optional[CancellationToken] = None,
    ) -> VerificationRun:
        validate_run(program, cases, method)
        run = VerificationRun(program, cases)
        run.state = RunState.running
        logger.info(f'Verification started: {len(run.cases)} case(s), language={program.language.value}')

        for index, case in enumerate(run.cases):
            if index:
                await self.sleep(random.uniform(*self.delay_range))

            if token is not None and token.cancelled:
                run.state = RunState.cancelled
                logger.info(f'Verification cancelled after {len(run.results)} of {len(run.cases)} case(s)')
                return run

            result = await self._run_case(run, case)
            run.results.append(result)
            logger.debug(f'Case {case.id}: passed={result.passed} errored={result.errored}')

        run.state = RunState.completed
        summary = run.summary
        logger.info(f'Verification completed: {summary.passed_count}/{summary.total_count} passed')
        return run

    async def _run_case(self, run: VerificationRun, case: TestCase) -> VerificationResult:
        common = dict(
            id=case.id,
            input=case.input,
            expected_output=case.expected_output,
            input_file_name=case.input_file_name,
            output_file_name=case.output_file_name,
        )
        try:
            response = await self.proxy.execute(run.request_for(case))
        except ProxyError as e:
            return VerificationResult(
                actual_output=f'Error: {e.message}',
                passed=False,
                execution_time=NO_TIME,
                errored=True,
                **common,
            )

        actual = response.output.strip()
        return VerificationResult(
            actual_output=actual,
            passed=outputs_match(actual, case.expected_output),
            execution_time=response.execution_time,
            **common,
        )
