"""Structured prompt builder for AI sales analysis."""

import json

from llm_synthesis.schema import SalesAnalysis

_SCHEMA_JSON = json.dumps(SalesAnalysis.model_json_schema(), indent=2)

_EXAMPLE_OUTPUT = json.dumps(
    {
        "trends": ["Running Shoes revenue grew steadily over the period"],
        "patterns": ["Weekend sales are noticeably higher across Sportswear"],
        "predictions": ["Electronics demand is likely to stay flat next month"],
        "risks": ["Pain Relief Gel is declining and may need a promotion"],
        "insights": ["Bundle Protein Bar Pack with Yoga Mat to lift basket size"],
        "summary": "Overall sales are healthy with growth concentrated in Sportswear.",
    },
    indent=2,
)

SYSTEM_PROMPT = """\
You are an expert sales data analyst. Analyze the provided sales data and \
return insights in JSON format.

Provide the following JSON structure:
- "trends": trend observations about products growing or declining
- "patterns": detected patterns such as seasonal, weekly or category-based
- "predictions": future demand predictions
- "risks": risk flags such as declining products or irregular behavior
- "insights": actionable business recommendations
- "summary": a 2-3 sentence overall business health summary

Be specific with product names and categories from the data. Use numbers and \
percentages where possible. Each array should have 3-5 items. Be concise but \
actionable. Return only the JSON object.
"""


class SalesAnalysisPromptBuilder:
    """Builds the system and user prompts for one analysis request."""

    @property
    def system_prompt(self) -> str:
        return (
            f"{SYSTEM_PROMPT}\n"
            f"Your response MUST conform to this JSON schema:\n\n"
            f"```json\n{_SCHEMA_JSON}\n```\n\n"
            f"Example:\n\n```json\n{_EXAMPLE_OUTPUT}\n```"
        )

    def build_prompt(self, digest: str, analysis_type: str = "full") -> str:
        """Build the user prompt from a plain-text sales digest.

        Args:
            digest: Output of ``analytics.digest.build_sales_digest``.
            analysis_type: Free-form analysis focus; ``full`` by default.

        Returns:
            The user prompt string.
        """
        return (
            f"Analysis type: {analysis_type or 'full'}\n\n"
            f"Sales Data Summary:\n{digest}\n\n"
            f"Analyze this sales data and provide insights in the JSON format specified."
        )
