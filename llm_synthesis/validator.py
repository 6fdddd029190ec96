"""Turns a raw model reply into a validated SalesAnalysis.

Replies are checked in three stages, and the first failure is reported:

* ``json_parse``: a JSON object could be located and decoded;
* ``schema``: the object matches the SalesAnalysis fields;
* ``content``: at least one section or the summary says something.
"""

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from llm_synthesis.schema import ANALYSIS_SECTIONS, SalesAnalysis

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)

VALIDATION_STAGES = ("json_parse", "schema", "content")


class LLMOutputValidationError(Exception):
    """A model reply that could not be turned into a SalesAnalysis.

    Attributes:
        stage: One of ``VALIDATION_STAGES``.
        errors: Human-readable problems found at that stage.
        raw_response: The reply exactly as the adapter returned it.
    """

    def __init__(self, stage: str, errors: List[str], raw_response: str) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        super().__init__(f"analysis reply rejected at '{stage}': " + "; ".join(errors))


def _decode_reply(raw_response: str) -> Dict[str, Any]:
    text = (raw_response or "").strip()
    fenced = _FENCE.match(text)
    if fenced:
        text = fenced.group(1).strip()

    # Models often wrap the object in prose; keep the outermost braces.
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise LLMOutputValidationError("json_parse", ["no JSON object found in response"], raw_response)

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise LLMOutputValidationError(
            "json_parse", [f"line {exc.lineno} column {exc.colno}: {exc.msg}"], raw_response
        ) from exc

    if not isinstance(data, dict):
        raise LLMOutputValidationError("schema", ["top-level JSON must be an object"], raw_response)
    return data


def _describe(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'analysis'}: {error['msg']}"
        for error in exc.errors()
    ]


def validate_analysis_output(raw_response: str) -> SalesAnalysis:
    """Validate a reply from the analysis prompt.

    Args:
        raw_response: Text returned by the LLM adapter, optionally fenced
            in markdown or surrounded by prose.

    Returns:
        The parsed analysis.

    Raises:
        LLMOutputValidationError: At the first stage that fails.
    """
    data = _decode_reply(raw_response)

    try:
        analysis = SalesAnalysis.model_validate(data)
    except ValidationError as exc:
        raise LLMOutputValidationError("schema", _describe(exc), raw_response) from exc

    if not analysis.summary and not any(getattr(analysis, section) for section in ANALYSIS_SECTIONS):
        raise LLMOutputValidationError(
            "content", ["every section is empty and no summary was given"], raw_response
        )
    return analysis
