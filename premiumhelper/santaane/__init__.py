"""Santaane AI abstract analysis for premium submissions."""

from .analysis import AnalysisResult, parse_ai_response
from .client import AbstractAnalyzer, ChatCompletionClient
from .gate import EligibilityGate
from .helper import PremiumSubmissionHelper
from .injector import WizardSectionInjector
from .widget import AnalysisWidget

__all__ = [
    "AnalysisResult",
    "parse_ai_response",
    "AbstractAnalyzer",
    "ChatCompletionClient",
    "EligibilityGate",
    "PremiumSubmissionHelper",
    "WizardSectionInjector",
    "AnalysisWidget",
]
