# Analyzer package - framework analysis engine
from .prompts import build_prompt
from .frameworks import ANALYZERS, FrameworkAnalyzer, run_frameworks
from .pipeline import AnalysisPipeline
from .report import ReportBuilder, ComprehensiveReport

__all__ = [
    "build_prompt",
    "ANALYZERS",
    "FrameworkAnalyzer",
    "run_frameworks",
    "AnalysisPipeline",
    "ReportBuilder",
    "ComprehensiveReport",
]
