"""Re-asks the model when its analysis reply cannot be validated.

Only malformed replies are retried. Provider failures raised by the
adapter (``LLMServiceError``) propagate on the first attempt.
"""

import logging
from typing import List, Optional

from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.schema import SalesAnalysis
from llm_synthesis.validator import LLMOutputValidationError, validate_analysis_output

logger = logging.getLogger(__name__)

RETRYABLE_STAGES = frozenset({"json_parse", "schema", "content"})

_CORRECTION = (
    "\n\nYour previous reply could not be used ({problem}). "
    "Reply again with only the JSON object described above."
)


class LLMRetryExhaustedError(Exception):
    """Every attempt produced an unusable reply.

    Attributes:
        attempts: Number of model calls made.
        history: The validation error of each attempt, oldest first.
    """

    def __init__(self, attempts: int, history: List[LLMOutputValidationError]) -> None:
        self.attempts = attempts
        self.history = history
        super().__init__(f"no valid analysis after {attempts} attempt(s): {self.last_error}")

    @property
    def last_error(self) -> LLMOutputValidationError:
        return self.history[-1]

    @property
    def last_raw_response(self) -> str:
        return self.last_error.raw_response


def generate_with_retry(
    adapter: BaseLLMAdapter,
    prompt: str,
    max_retries: int = 2,
    system_prompt: Optional[str] = None,
) -> SalesAnalysis:
    """Call *adapter* until a reply validates or attempts run out.

    Each retry repeats the prompt with a short note naming what was wrong
    with the previous reply.

    Args:
        adapter: Model adapter.
        prompt: The analysis prompt.
        max_retries: Extra attempts after the first; negative means none.
        system_prompt: Optional system instructions, sent on every attempt.

    Raises:
        LLMRetryExhaustedError: All attempts failed validation.
        LLMServiceError: Propagated from the adapter without retrying.
    """
    attempts = 1 + max(0, max_retries)
    history: List[LLMOutputValidationError] = []
    current_prompt = prompt

    for attempt in range(1, attempts + 1):
        raw = adapter.generate(current_prompt, system_prompt=system_prompt)
        try:
            analysis = validate_analysis_output(raw)
        except LLMOutputValidationError as exc:
            if exc.stage not in RETRYABLE_STAGES:
                raise
            history.append(exc)
            logger.warning("Analysis attempt %d/%d rejected (%s): %s", attempt, attempts, exc.stage, "; ".join(exc.errors))
            current_prompt = prompt + _CORRECTION.format(problem=exc.stage.replace("_", " "))
            continue

        if history:
            logger.info("Analysis validated on attempt %d/%d", attempt, attempts)
        return analysis

    raise LLMRetryExhaustedError(attempts=attempts, history=history)
