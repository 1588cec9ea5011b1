"""
Extraction Module for uplatko.

Turns raw invoice text into a PartialPaymentRecord:
    - heuristic: regex and layout heuristics (always available)
    - providers: Gemini / Groq AI extraction
    - orchestrator: provider selection with guaranteed heuristic fallback
"""

from .heuristic import HeuristicExtractor, extract
from .providers import (
    BaseProvider,
    GeminiProvider,
    GroqProvider,
    ProviderConfig,
    StageResult,
    PROVIDERS,
    get_provider,
)
from .orchestrator import ExtractionOrchestrator, ExtractionOutcome, resolve

__all__ = [
    'HeuristicExtractor',
    'extract',
    'BaseProvider',
    'GeminiProvider',
    'GroqProvider',
    'ProviderConfig',
    'StageResult',
    'PROVIDERS',
    'get_provider',
    'ExtractionOrchestrator',
    'ExtractionOutcome',
    'resolve',
]
