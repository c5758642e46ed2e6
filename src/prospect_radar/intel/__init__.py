"""Prospect intel: prompt building, model lookup and response parsing."""

from .client import IntelLookupError, request_intel
from .parser import IntelResult, IntelSource, parse_intel_response
from .prompts import build_intel_prompt

__all__ = [
    "IntelLookupError",
    "IntelResult",
    "IntelSource",
    "build_intel_prompt",
    "parse_intel_response",
    "request_intel",
]
