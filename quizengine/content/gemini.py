from __future__ import annotations

"""Gemini-backed question provider.

Asks the `generateContent` REST endpoint for a JSON array of multiple
choice questions and maps it into `Question` records. Any transport or
parsing failure surfaces as `ProviderError` so the loader can fall back to
static content.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import ProviderError
from ..results.schema import Question

logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

PROMPT_TEMPLATE = """Generate {count} multiple-choice quiz questions about "{topic}".
Difficulty: {difficulty}.
Each question must have exactly 4 options and one correct answer.
Respond with JSON only: an array of objects with the keys
"question" (string), "options" (array of 4 strings),
"correctAnswer" (0-based index of the correct option) and
"explanation" (one sentence)."""


def _retrying_session() -> requests.Session:
    # Retries for 429/5xx; POST must be listed explicitly
    session = requests.Session()
    session.mount(
        "https://",
        HTTPAdapter(
            max_retries=Retry(
                total=3,
                backoff_factor=1.2,
                status_forcelist=(408, 409, 429, 500, 502, 503, 504),
                allowed_methods=frozenset(["POST"]),
                raise_on_status=False,
            )
        ),
    )
    return session


class GeminiQuestionProvider:
    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        *,
        timeout_s: int = 60,
        temperature: float = 0.7,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("a Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s
        self.temperature = temperature
        self._session = session or _retrying_session()

    def generate(self, topic: str, difficulty: str, count: int) -> List[Question]:
        prompt = PROMPT_TEMPLATE.format(count=count, topic=topic, difficulty=difficulty)
        items = self._call_json(prompt)
        if isinstance(items, dict):
            # Some answers wrap the list: {"questions": [...]}
            items = items.get("questions", [])
        if not isinstance(items, list):
            raise ProviderError("Gemini response is not a list of questions")
        questions: List[Question] = []
        for i, raw in enumerate(items, 1):
            if not isinstance(raw, dict):
                logger.info("dropping non-object question #%d from %s", i, self.model)
                continue
            try:
                questions.append(Question.from_json(raw, default_id=f"ai-{i}"))
            except ValueError as exc:
                logger.info("dropping invalid generated question #%d: %s", i, exc)
        return questions

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{BASE_URL}/{self.model}:generateContent"
        try:
            resp = self._session.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise ProviderError(f"Gemini request failed: {exc}") from exc
        if resp.status_code != 200:
            raise ProviderError(f"Gemini non-200: {resp.status_code} body={resp.text[:400]}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError("Gemini returned a non-JSON body") from exc

    def _call_json(self, prompt_text: str) -> Any:
        payload = {
            "generationConfig": {"temperature": self.temperature},
            "contents": [{"parts": [{"text": prompt_text}]}],
        }
        data = self._post(payload)
        text = extract_text(data)
        if not text:
            raise ProviderError("Gemini returned empty text")
        return parse_json_text(text)


def extract_text(data: Dict[str, Any]) -> str:
    """Concatenate the `.text` parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


def parse_json_text(text: str) -> Any:
    """Parse model output as JSON, tolerating code fences and chatter around it."""
    t = text.strip()
    if t.startswith("```"):
        t = t.strip("`").strip()
        if t.lower().startswith("json"):
            t = t[4:].strip()
    t = re.sub(r"^\s*json\s*[\r\n]+", "", t, flags=re.I)

    try:
        return json.loads(t)
    except json.JSONDecodeError:
        pass

    # Cut from the first opening bracket to the last closing one
    first = min([i for i in (t.find("{"), t.find("[")) if i != -1], default=-1)
    last = max(t.rfind("}"), t.rfind("]"))
    if first != -1 and last > first:
        try:
            return json.loads(t[first:last + 1])
        except json.JSONDecodeError:
            pass
    raise ProviderError(f"Could not parse JSON from Gemini output: {t[:400]}")


def make_provider(cfg: Dict[str, Any]) -> Optional[GeminiQuestionProvider]:
    """Build the provider from the `provider` config section, or None when disabled/unkeyed."""
    pcfg = cfg.get("provider", {})
    if not bool(pcfg.get("enabled", True)):
        return None
    api_key = os.getenv(str(pcfg.get("api_key_env", "GEMINI_API_KEY")), "").strip()
    if not api_key:
        logger.info("no Gemini API key set; using sample questions")
        return None
    return GeminiQuestionProvider(
        api_key,
        model=str(pcfg.get("model", "gemini-2.5-flash")),
        timeout_s=int(pcfg.get("timeout_s", 60)),
        temperature=float(pcfg.get("temperature", 0.7)),
    )
