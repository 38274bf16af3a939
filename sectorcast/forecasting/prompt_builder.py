"""
Render the forecast prompt sent to the inference service.

Pure function of its inputs: no I/O, no clock, so the same context always
produces the same prompt text.
"""

from __future__ import annotations

import json
from typing import Optional

from sectorcast.context.models import AggregatedContext
from sectorcast.forecasting.models import Sector, Timeframe
from sectorcast.forecasting.taxonomy import taxonomy_for

MIN_CONFIDENCE = 0.65
MAX_CONFIDENCE = 0.95

_OUTPUT_CONTRACT = """\
{{
  "predictions": [
    {{
      "itemName": "string, unique within this list",
      "category": "string, one of the candidate categories where possible",
      "subcategory": "string",
      "currentDemand": number (units, >= 0),
      "predictedDemand": number (units, >= 0),
      "demandChangePercentage": number ((predictedDemand - currentDemand) / currentDemand * 100),
      "demandTrend": "increase" | "decrease" | "no-change",
      "confidence": number ({min_conf} to {max_conf}),
      "peakPeriod": "string",
      "reasoning": "string",
      "marketFactors": ["string", ...],
      "recommendations": ["string", ...],
      "riskLevel": "Low" | "Medium" | "High"
    }}
  ],
  "marketAnalysis": "string, 2-3 sentence overview"
}}"""


def _as_str(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def build_prompt(
    sector: Sector | str,
    region: str,
    timeframe: Timeframe | str,
    context: AggregatedContext,
    filters: Optional[dict[str, Optional[str]]] = None,
    prediction_count: int = 10,
) -> str:
    """Build the structured-output forecast prompt.

    Args:
        sector: Sector being forecast.
        region: Canonical region name.
        timeframe: Forecast horizon, e.g. "30 days".
        context: Aggregated signals; embedded verbatim as JSON.
        filters: Optional ``department`` / ``category`` narrowing hints.
        prediction_count: Exact number of items to request.

    Returns:
        The prompt text.
    """
    taxonomy = taxonomy_for(sector)
    sector_name = taxonomy.name
    timeframe = _as_str(timeframe)
    filters = {k: v for k, v in (filters or {}).items() if v and v != "all"}

    context_json = json.dumps(context.to_prompt_dict(), indent=2, sort_keys=True)

    prompt_parts = [
        f"You are a demand forecasting analyst for the {sector_name} sector in {region}.",
        f"Forecast demand for {taxonomy.focus} over the next {timeframe}.",
        "",
        "## Current regional context",
        context_json,
        "",
        f"Context sources: {', '.join(context.sources_used) or 'none'}",
        "",
        "## Candidate item categories",
        ", ".join(taxonomy.categories),
        "",
        "## Departments",
        ", ".join(taxonomy.departments),
    ]

    if filters:
        prompt_parts.append("")
        prompt_parts.append("## Focus")
        if filters.get("department"):
            prompt_parts.append(f"Only items relevant to the {filters['department']} department.")
        if filters.get("category"):
            prompt_parts.append(f"Only items in the {filters['category']} category.")

    prompt_parts.extend([
        "",
        "## Instructions",
        f"1. Return EXACTLY {prediction_count} predictions, each for a different item.",
        "2. demandChangePercentage must agree in sign with predictedDemand - currentDemand.",
        f"3. confidence must be between {MIN_CONFIDENCE} and {MAX_CONFIDENCE}.",
        "4. riskLevel is High only where a shortage or demand spike is likely.",
        "5. Ground reasoning and marketFactors in the regional context above.",
        "",
        "## Output format",
        "Respond with ONLY a JSON object of this shape. No prose, no markdown, no code fences:",
        _OUTPUT_CONTRACT.format(min_conf=MIN_CONFIDENCE, max_conf=MAX_CONFIDENCE),
    ])

    return "\n".join(prompt_parts)
