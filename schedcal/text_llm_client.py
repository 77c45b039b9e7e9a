"""
Text LLM Client interface for generating schedule text.
Supports StubTextLLMClient (offline) and GeminiTextLLMClient (real provider).

Clients never raise: failures come back as a GenerationResult with `error`
set and an "Error generating content: ..." text.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from schedcal.logging_helper import Log
from schedcal.settings_manager import get_gemini_model

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
REQUEST_TIMEOUT_SECONDS = 60

# Tool directive enabling web-search grounding
GOOGLE_SEARCH_TOOL: Dict[str, Any] = {"google_search": {}}


@dataclass(frozen=True)
class GroundingCitation:
    uri: str
    title: str


@dataclass
class GenerationResult:
    text: str
    sources: List[GroundingCitation] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)

    @classmethod
    def failure(cls, message: str) -> "GenerationResult":
        return cls(text=f"Error generating content: {message}", error=message)


class TextLLMClient(ABC):
    """Abstract base class for text generation clients."""

    @abstractmethod
    def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> GenerationResult:
        """
        Generate text for a prompt.

        Args:
            prompt: User prompt
            system_instruction: Optional system instruction
            tools: Optional tool directives (e.g. [GOOGLE_SEARCH_TOOL])

        Returns:
            GenerationResult (never raises)
        """


STUB_SCHEDULE = """### Monday, July 29th, 2024
09:00 AM - Team Meeting
12:30 PM - Lunch with Sarah
14:00 - Dentist Appointment

### Tuesday, July 30th, 2024
10:00 AM - Finish quarterly report
Task: Call John @ 3:00 PM
"""


class StubTextLLMClient(TextLLMClient):
    """
    Stub client for offline use and tests.
    Returns a fixed schedule in the same markdown shape the real model is asked for.
    """

    def __init__(self, text: str = STUB_SCHEDULE):
        self.text = text
        self.prompts: List[str] = []

    def generate_text(self, prompt, system_instruction=None, tools=None) -> GenerationResult:
        Log.section("Stub LLM Client")
        Log.info("Using stub LLM client (offline mode)")
        self.prompts.append(prompt)
        Log.kv({"stage": "llm", "provider": "stub", "result": "success", "chars": len(self.text)})
        return GenerationResult(text=self.text)


def _extract_citations(candidate: Dict[str, Any]) -> List[GroundingCitation]:
    metadata = candidate.get("groundingMetadata") or {}
    citations: List[GroundingCitation] = []
    for chunk in metadata.get("groundingChunks") or []:
        source = chunk.get("web") or chunk.get("retrievedContext")
        if not source or not source.get("uri"):
            continue
        citations.append(GroundingCitation(uri=source["uri"], title=source.get("title") or source["uri"]))
    return citations


class GeminiTextLLMClient(TextLLMClient):
    """
    Gemini generateContent REST client.
    """

    def __init__(self, api_key: str, model: Optional[str] = None):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key
            model: Model name (defaults to the configured gemini_model)
        """
        self.api_key = api_key
        self.model = model or get_gemini_model()
        self.api_url = f"{GEMINI_API_BASE}/{self.model}:generateContent"

    def _build_payload(self, prompt, system_instruction, tools) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if tools:
            payload["tools"] = tools
        return payload

    def generate_text(self, prompt, system_instruction=None, tools=None) -> GenerationResult:
        Log.section("Gemini LLM Client")
        Log.info(f"Calling Gemini API ({self.model})")
        Log.kv({
            "stage": "llm",
            "provider": "gemini",
            "model": self.model,
            "status": "requesting",
            "prompt_chars": len(prompt),
            "tools": len(tools or []),
        })

        try:
            response = requests.post(
                self.api_url,
                params={"key": self.api_key},
                json=self._build_payload(prompt, system_instruction, tools),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            Log.info(f"API response status: {response.status_code}")
            if response.status_code != 200:
                Log.error(f"Gemini API error: {response.text[:500]}")
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            Log.error(f"Gemini API request failed: {e}")
            Log.kv({"stage": "llm", "provider": "gemini", "result": "failed", "reason": "api_error", "error": str(e)})
            return GenerationResult.failure(str(e))
        except ValueError as e:
            Log.error(f"Gemini API returned invalid JSON: {e}")
            Log.kv({"stage": "llm", "provider": "gemini", "result": "failed", "reason": "json_parse_error"})
            return GenerationResult.failure(f"invalid response: {e}")

        candidates = result.get("candidates") or []
        if not candidates:
            reason = (result.get("promptFeedback") or {}).get("blockReason", "no candidates")
            Log.warn(f"Empty response from Gemini: {reason}")
            Log.kv({"stage": "llm", "provider": "gemini", "result": "failed", "reason": "empty_response"})
            return GenerationResult.failure(f"empty response ({reason})")

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts).strip()
        if not text:
            Log.warn("Gemini response contained no text")
            Log.kv({"stage": "llm", "provider": "gemini", "result": "failed", "reason": "empty_text"})
            return GenerationResult.failure("empty response")

        citations = _extract_citations(candidate)
        Log.kv({
            "stage": "llm",
            "provider": "gemini",
            "result": "success",
            "chars": len(text),
            "citations": len(citations),
        })
        return GenerationResult(text=text, sources=citations)


def get_llm_client() -> TextLLMClient:
    """
    Factory function to get the appropriate LLM client.

    USE_STUB forces the stub client. Otherwise GEMINI_API_KEY (or API_KEY)
    selects the Gemini client; without a key the stub is used.

    Returns:
        TextLLMClient instance
    """
    if os.getenv("USE_STUB"):
        Log.info("USE_STUB flag set - using stub client")
        return StubTextLLMClient()

    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    if api_key:
        Log.info("API key found - using Gemini client")
        return GeminiTextLLMClient(api_key)

    Log.info("No API key - using stub client")
    return StubTextLLMClient()
