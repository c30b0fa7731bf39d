"""
Logging Utility for the Design Pattern Detector
Configures module logging and prints human-readable detection reports.
"""
import logging
import sys
from datetime import datetime
from typing import Dict, List, Optional

from dpd.types import DetectionReport, RelationMatch, SolutionReport

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = True, debug: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        verbose: Log INFO and above
        debug: Log DEBUG and above
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


class ConsoleReporter:
    """Prints detection results as plain text sections."""

    def __init__(self, verbose: bool = True, show_superfluous: bool = True, show_missing: bool = True,
                 stream=None):
        self.verbose = verbose
        self.show_superfluous = show_superfluous
        self.show_missing = show_missing
        self.stream = stream if stream is not None else sys.stdout

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def section(self, title: str, char: str = "=", width: int = 70):
        """Print section header."""
        self._print(f"\n{char * width}")
        self._print(title)
        self._print(f"{char * width}")

    def info(self, message: str):
        if self.verbose:
            timestamp = datetime.now().strftime("%H:%M:%S")
            self._print(f"[{timestamp}] {message}")

    def statistics(self, stats: Dict, title: str = "Statistics"):
        """Print statistics dictionary."""
        self.section(title)
        for key, value in stats.items():
            key_formatted = key.replace('_', ' ').title()
            self._print(f"  {key_formatted}: {value}")

    def _relations(self, title: str, relations: List[RelationMatch]):
        if not relations:
            return
        self._print(f"  {title}:")
        for relation in relations:
            self._print(f"    {relation.source} -> {relation.target} ({', '.join(relation.types)})")

    def solution(self, index: int, solution: SolutionReport):
        self.section(f"Design pattern: {solution.pattern} (#{index})", char="-")
        for node in solution.nodes:
            self._print(f"  {node.system_name or node.system_id:>25} --> {node.pattern_name or node.pattern_id}")
        if self.show_superfluous:
            self._relations("Superfluous relations", solution.superfluous)
        if self.show_missing:
            self._relations("Missing relations", solution.missing)

    def report(self, report: DetectionReport, title: Optional[str] = None):
        """Print every solution of a report followed by its statistics."""
        self.section(title or f"Design pattern detection: {report.system}")
        if not report.solutions:
            self._print("No design patterns found.")
        for pattern in report.patterns:
            for index, solution in enumerate(report.solutions_for(pattern), 1):
                self.solution(index, solution)
        stats = {
            'patterns_checked': len(report.patterns),
            'solutions_found': len(report.solutions),
            'tolerance': report.tolerance,
            'time_ms': f"{report.timeMs:.1f}",
        }
        self.statistics(stats)
        for rules in report.rules:
            self.info(f"{rules.pattern}: {rules.evaluated} rule checks, {rules.failed} failed")
