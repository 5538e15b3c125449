import math
from dataclasses import dataclass
from typing import Any, Dict, Union

import httpx
from loguru import logger

from .errors import ProxyError, ProxyFailure
from .schemas import ExecutionRequest


NO_OUTPUT = 'No output'
NO_TIME = 'NA'


@dataclass(frozen=True)
class ExceptionOutput:
    text: str


@dataclass(frozen=True)
class StdoutOutput:
    text: str


@dataclass(frozen=True)
class NoOutput:
    text: str = NO_OUTPUT


ExecutorResult = Union[ExceptionOutput, StdoutOutput, NoOutput]


@dataclass(frozen=True)
class ExecutorResponse:
    result: ExecutorResult
    execution_time: Union[int, float, str] = NO_TIME

    @property
    def output(self) -> str:
        return self.result.text


def parse_executor_response(data: Any) -> ExecutorResponse:
    """Reduce the executor's JSON to a tagged result.

    A non-empty ``exception`` wins over ``stdout``; empty values count as absent.
    """
    if not isinstance(data, dict):
        return ExecutorResponse(NoOutput())

    exception = data.get('exception')
    stdout = data.get('stdout')
    if exception:
        result = ExceptionOutput(str(exception))
    elif stdout:
        result = StdoutOutput(str(stdout))
    else:
        result = NoOutput()

    elapsed = data.get('executionTimeMs')
    if elapsed is None:
        elapsed = data.get('executionTime')
    return ExecutorResponse(result, _elapsed_or_na(elapsed))


def _elapsed_or_na(value) -> Union[int, float, str]:
    if isinstance(value, bool):
        return NO_TIME
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else NO_TIME
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return NO_TIME
        return value
    return NO_TIME


class ExecutionProxy:
    """Forwards run requests to the external executor, one HTTP call each."""

    def __init__(self, endpoint: str, client: httpx.AsyncClient):
        self.endpoint = endpoint
        self.client = client

    async def forward(self, payload: Dict[str, Any]) -> Any:
        try:
            response = await self.client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            message = str(e) or e.__class__.__name__
            logger.warning(f'Executor call to {self.endpoint} failed: {message}')
            raise ProxyError(message, ProxyFailure.network_failure, e) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f'Executor at {self.endpoint} returned non-JSON body (status {response.status_code})')
            raise ProxyError(f'Invalid JSON from executor: {e}', ProxyFailure.unparseable_response, e) from e

        logger.debug(f'Executor responded with status {response.status_code}')
        return data

    async def execute(self, request: ExecutionRequest) -> ExecutorResponse:
        payload = {'properties': request.model_dump(mode='json')}
        return parse_executor_response(await self.forward(payload))
