"""
Analysis Session for Sentinel

Display-state container for one analysis view:

    empty --analyze--> loading --ok--> results
                               --fail--> error
    any   --reset----> empty

Blank input goes straight to ``error`` without touching the network. Only
one analysis is expected in flight per session and a new ``analyze`` call
does not cancel an earlier one.
"""

import logging
from typing import List, Optional

from .analyzer import ContractAnalyzer
from .errors import SentinelError, ValidationError
from .history import HistoryStore
from .model import AnalysisResult, AnalysisState, HistoryEntry

EMPTY_INPUT_MESSAGE = "Please enter some code to analyze"
GENERIC_ERROR_MESSAGE = "Analysis failed"


class AnalysisSession:
    """Tracks state, current results and history for one analysis view."""

    def __init__(self, analyzer: ContractAnalyzer, history: Optional[HistoryStore] = None):
        self.analyzer = analyzer
        self.history = history if history is not None else HistoryStore()
        self.state = AnalysisState.EMPTY
        self.results: Optional[AnalysisResult] = None
        self.last_error: Optional[str] = None
        self.logger = logging.getLogger(__name__)

    def _fail(self, message: str) -> None:
        self.state = AnalysisState.ERROR
        self.last_error = message

    async def analyze(self, code: str) -> Optional[AnalysisResult]:
        """Run an analysis and move to ``results`` or ``error``.

        Returns the result, or None when the analysis failed; the reason is
        left in ``last_error``.
        """
        if not code or not code.strip():
            self._fail(EMPTY_INPUT_MESSAGE)
            return None

        self.state = AnalysisState.LOADING
        self.last_error = None

        try:
            results = await self.analyzer.analyze_contract(code)
        except SentinelError as e:
            self.logger.error(f"Analysis error: {e.message}")
            self._fail(e.message)
            return None
        except Exception as e:
            self.logger.exception(f"Unexpected analysis error: {e}")
            self._fail(GENERIC_ERROR_MESSAGE)
            return None

        self.results = results
        self.state = AnalysisState.RESULTS
        try:
            self.history.add(HistoryEntry.create(code, results))
        except OSError as e:
            self.logger.error(f"Could not save analysis history: {e}")
        return results

    def reset(self) -> None:
        self.state = AnalysisState.EMPTY
        self.results = None
        self.last_error = None

    def load_from_history(self, entry: HistoryEntry) -> AnalysisResult:
        self.results = entry.results
        self.state = AnalysisState.RESULTS
        self.last_error = None
        return entry.results

    def clear_history(self) -> None:
        self.history.clear()

    @property
    def history_entries(self) -> List[HistoryEntry]:
        return self.history.entries

    @property
    def error_message(self) -> str:
        return self.last_error or GENERIC_ERROR_MESSAGE

    def export_report(self, output_dir: str = "./reports", filename: Optional[str] = None) -> str:
        """Write the current results as a JSON report and return its path."""
        if self.results is None:
            raise ValidationError("No analysis results to export")
        from sentinel.utils.report import ReportGenerator

        return ReportGenerator(output_dir).export_json(self.results, filename)
