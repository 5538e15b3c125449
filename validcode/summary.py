import math
from typing import Sequence

from .schemas import RunSummary, VerificationResult


def summarize(results: Sequence[VerificationResult]) -> RunSummary:
    total = len(results)
    passed = sum(1 for r in results if r.passed)
    rate = math.floor(passed / total * 100 + 0.5) if total else 0
    return RunSummary(passed_count=passed, total_count=total, success_rate_percent=rate)
