"""
Judge Service Client
Runs code against test cases on an external Judge0-compatible service.
We never execute code ourselves; we only send it and read back verdicts.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional

import httpx

from learnhub import config
from learnhub.core.errors import ExecutionFailed
from learnhub.courses.course_models import ChallengeTestCase, Language

logger = logging.getLogger(__name__)

# Judge0 CE language ids
LANGUAGE_IDS = {
    Language.PYTHON: 71,
    Language.CPP: 54,
    Language.JAVA: 62,
    Language.JAVASCRIPT: 63,
    Language.TYPESCRIPT: 74,
    Language.GO: 60,
    Language.RUST: 73,
}

ACCEPTED_STATUS_ID = 3


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def aggregate_results(results: List[dict]) -> dict:
    """
    Fold per-test-case judge results into one verdict.
    PASSED only when every test case was accepted.
    """
    stdout_lines = []
    stderr_lines = []
    passed = 0
    max_time = 0.0
    max_memory = 0

    for index, result in enumerate(results, start=1):
        status = result.get("status") or {}
        description = status.get("description") or "Unknown"

        if status.get("id") == ACCEPTED_STATUS_ID:
            passed += 1

        max_time = max(max_time, _to_float(result.get("time")))
        max_memory = max(max_memory, int(_to_float(result.get("memory"))))

        stdout_lines.append(f"Test case {index}: {description}\n{result.get('stdout') or ''}".strip())

        stderr_parts = [
            part for part in (result.get("stderr"), result.get("compile_output"), result.get("message"))
            if part
        ]
        if stderr_parts:
            stderr_lines.append(f"Test case {index}: {description}\n" + "\n".join(stderr_parts))

    total = len(results)
    return {
        "status": "PASSED" if total > 0 and passed == total else "FAILED",
        "stdout": "\n\n".join(stdout_lines),
        "stderr": "\n\n".join(stderr_lines) if stderr_lines else None,
        "metrics": {
            "runtime": f"{max_time:.3f}s",
            "memoryUsed": f"{max_memory}KB",
            "passed": passed,
            "total": total,
        },
    }


class JudgeClient:
    def __init__(
        self,
        base_url: str = None,
        api_key: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.JUDGE_API_URL).rstrip("/")
        self.api_key = config.JUDGE_API_KEY if api_key is None else api_key
        self.timeout = timeout or config.JUDGE_TIMEOUT_SECONDS
        self.transport = transport

    def _headers(self) -> dict:
        return {"X-Auth-Token": self.api_key} if self.api_key else {}

    async def _run_one(self, client: httpx.AsyncClient, code: str, language_id: int, test_case: ChallengeTestCase) -> dict:
        response = await client.post(
            f"{self.base_url}/submissions",
            params={"base64_encoded": "false", "wait": "true"},
            json={
                "source_code": code,
                "language_id": language_id,
                "stdin": _as_text(test_case.input),
                "expected_output": _as_text(test_case.expected_output),
            },
            headers=self._headers(),
        )
        response.raise_for_status()
        return response.json()

    async def run(self, code: str, language: Language, test_cases: List[ChallengeTestCase]) -> dict:
        """
        Execute all test cases concurrently and aggregate.
        Any timeout or transport/protocol failure raises ExecutionFailed;
        nothing is retried.
        """
        language_id = LANGUAGE_IDS[language]

        # every request settles before the client is closed
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            outcomes = await asyncio.gather(
                *(self._run_one(client, code, language_id, tc) for tc in test_cases),
                return_exceptions=True,
            )

        for outcome in outcomes:
            if isinstance(outcome, Exception):
                failure = self._execution_failure(outcome)
                if failure is outcome:
                    raise outcome
                raise failure from outcome

        return aggregate_results(outcomes)

    def _execution_failure(self, exc: Exception) -> Exception:
        """Map a transport or protocol error to ExecutionFailed; anything else is returned as-is"""
        if isinstance(exc, httpx.TimeoutException):
            logger.warning("Judge service timed out after %ss", self.timeout)
            return ExecutionFailed("Code execution timed out")
        if isinstance(exc, httpx.HTTPStatusError):
            logger.warning("Judge service answered %s", exc.response.status_code)
            return ExecutionFailed("Judge service rejected the submission")
        if isinstance(exc, httpx.HTTPError):
            logger.warning("Judge service unreachable: %s", exc)
            return ExecutionFailed("Judge service unavailable")
        if isinstance(exc, ValueError):
            logger.warning("Judge service returned a non-JSON body")
            return ExecutionFailed("Judge service returned an invalid response")
        return exc

    async def ping(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=5.0, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/about", headers=self._headers())
            return response.status_code == 200
        except httpx.HTTPError:
            return False


def get_judge_client() -> JudgeClient:
    """Judge client dependency"""
    return JudgeClient()
