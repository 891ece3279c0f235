"""
Generative Deep-Analysis strategy

Asks an OpenAI-compatible chat model (OpenRouter by default) for the expert
report. Any failure (no key, transport error, timeout, error status, reply
that is not a valid DeepAnalysis) falls back to the heuristic generator, so
``analyze`` always returns a complete report.
"""
import asyncio
import json
import re
from typing import Any, Dict, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from app.features.audit.schemas.audit import AuditResult
from app.features.audit.schemas.deep_analysis import DeepAnalysis
from app.features.audit.services.deep_analysis.base import DeepAnalyzer
from app.features.audit.services.deep_analysis.heuristic import HeuristicDeepAnalyzer
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

FENCED_JSON = re.compile(r"```(?:json)?\s*\n(.*?)\n\s*```", re.DOTALL)

RESPONSE_SHAPE = """{
  "critical_issues": [{"id": "string", "title": "string", "description": "string", "impact": "string", "fix": "string", "business_impact": "string", "code_example": "string|null", "category": "seo|technical|content|performance|navigation|accessibility", "estimated_fix_time": "string|null"}],
  "high_priority_issues": [same shape as critical_issues],
  "medium_priority_issues": [same shape as critical_issues],
  "content_quality_assessment": {"overall_score": number (0-100), "issues": ["string"], "recommendations": ["string"]},
  "business_impact_projections": {"search_visibility_increase": "string", "user_experience_improvement": "string", "conversion_rate_impact": "string"},
  "action_items": [{"priority": "immediate|high|medium|low", "task": "string", "timeline": "string", "code_example": "string|null", "success_metrics": ["string"]}]
}"""


class GenerativeAnalysisError(Exception):
    """Reply could not be turned into a DeepAnalysis."""


def extract_json(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model reply.

    Accepts a bare object, an object fenced in ```json, or an object wrapped
    in prose (first '{' to last '}').
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise GenerativeAnalysisError("Empty reply")

    candidates = [cleaned]
    fenced = FENCED_JSON.search(cleaned)
    if fenced:
        candidates.append(fenced.group(1))
    first, last = cleaned.find("{"), cleaned.rfind("}")
    if 0 <= first < last:
        candidates.append(cleaned[first:last + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise GenerativeAnalysisError("Reply does not contain a JSON object")


class GenerativeDeepAnalyzer(DeepAnalyzer):
    name = "generative"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_tokens: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
        fallback: Optional[DeepAnalyzer] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENROUTER_API_KEY
        self.base_url = base_url or settings.OPENROUTER_BASE_URL
        self.model = model or settings.DEEP_ANALYSIS_MODEL
        self.timeout_seconds = timeout_seconds or settings.DEEP_ANALYSIS_TIMEOUT_SECONDS
        self.max_tokens = max_tokens or settings.DEEP_ANALYSIS_MAX_TOKENS
        self.fallback = fallback or HeuristicDeepAnalyzer()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(base_url=self.base_url, api_key=self.api_key)
        return self._client

    async def analyze(self, audit: AuditResult, page_content: str = "") -> DeepAnalysis:
        if not self.api_key and self._client is None:
            logger.warning("OPENROUTER_API_KEY not configured, using heuristic analysis")
            return await self.fallback.analyze(audit, page_content)

        prompt = self.build_prompt(audit, page_content)
        try:
            reply = await asyncio.wait_for(self._complete(prompt), timeout=self.timeout_seconds)
            analysis = DeepAnalysis.model_validate(extract_json(reply))
        except asyncio.TimeoutError:
            logger.warning(f"Generative analysis timed out after {self.timeout_seconds}s for {audit.url}")
            return await self.fallback.analyze(audit, page_content)
        except (GenerativeAnalysisError, ValidationError) as e:
            logger.warning(f"Unusable generative analysis reply for {audit.url}: {e}")
            return await self.fallback.analyze(audit, page_content)
        except Exception as e:
            logger.error(f"Generative analysis call failed for {audit.url}: {str(e)}")
            return await self.fallback.analyze(audit, page_content)

        logger.info(f"Generative analysis completed for {audit.url} with {self.model}")
        return analysis

    async def _complete(self, prompt: str) -> str:
        completion = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {
                    "role": "system",
                    "content": "You are an expert SEO analyst. Always respond with valid JSON only.",
                },
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
        )
        return completion.choices[0].message.content or ""

    @staticmethod
    def build_prompt(audit: AuditResult, page_content: str) -> str:
        audit_data = audit.model_dump(mode="json", exclude={"screenshots", "llm_analysis"})
        sample = (page_content or "")[:settings.PAGE_CONTENT_SAMPLE_CHARS]
        return f"""
You are an expert SEO analyst. Analyze this website audit data and provide detailed insights.

WEBSITE: {audit.url}
AUDIT DATA: {json.dumps(audit_data, indent=2)}

PAGE CONTENT SAMPLE:
{sample}...

Please provide a detailed analysis including:

1. Critical Issues (high impact, fix immediately): specific problems with business impact and code examples for fixes.
2. High Priority Issues (fix this week): technical SEO, content quality and user experience problems.
3. Medium Priority Issues (fix this month): enhancement opportunities and best practice implementations.
4. Content Quality Assessment: professional tone, credibility issues, content gaps.
5. Business Impact Projections: search visibility, user experience, conversion rate.
6. Specific Action Items: code snippets, timelines and success metrics to track.

You MUST respond with ONLY valid JSON matching this exact structure:
{RESPONSE_SHAPE}

Do not include any text before or after the JSON.
"""
