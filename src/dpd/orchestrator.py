"""
Detection orchestration: run every pattern of a template file against one system.

Each pattern gets its own Matcher, so runs can go in parallel on a thread
pool without sharing any search state.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Union

from dpd.config_loader import DetectorConfig, load_config
from dpd.core.graph import PatternGraph, SystemGraph
from dpd.matching.matcher import Matcher
from dpd.matching.solution import Solutions
from dpd.parsers.template_parser import parse_templates
from dpd.parsers.xmi_parser import parse_xmi
from dpd.types import DetectionReport, RuleSummary, SolutionReport

logger = logging.getLogger(__name__)


def _match_one(pattern: PatternGraph, system: SystemGraph, tolerance: int) -> Solutions:
    return Matcher().match(pattern, system, tolerance)


def detect_patterns(patterns: List[PatternGraph], system: SystemGraph, tolerance: int = 0,
                    max_workers: int = 1) -> Dict[str, Solutions]:
    """
    Match every pattern against the system.

    Returns:
        Solutions per pattern name, in the order of the patterns

    Raises:
        ValueError: negative tolerance, or two patterns sharing a name
        RuleError: the first rule error of any run; other runs are abandoned
    """
    if tolerance < 0:
        raise ValueError(f"Tolerance must be a non-negative integer, got {tolerance}")
    names = [p.name for p in patterns]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Pattern names must be unique, repeated: {', '.join(duplicates)}")

    if max_workers <= 1 or len(patterns) <= 1:
        results = [_match_one(p, system, tolerance) for p in patterns]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_match_one, p, system, tolerance) for p in patterns]
            try:
                results = [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    return {pattern.name: solutions for pattern, solutions in zip(patterns, results)}


def build_report(system: SystemGraph, tolerance: int, results: Dict[str, Solutions],
                 elapsed_ms: float = 0.0) -> DetectionReport:
    return DetectionReport(
        system=system.name,
        tolerance=tolerance,
        patterns=list(results),
        solutions=[SolutionReport.from_solution(s) for solutions in results.values() for s in solutions],
        rules=[RuleSummary.from_solutions(name, solutions) for name, solutions in results.items()],
        timeMs=elapsed_ms,
    )


def run_detection(template_path: Union[str, Path], system_path: Union[str, Path], tolerance: int = 0,
                  max_workers: int = 1) -> DetectionReport:
    """Parse both input files, detect all patterns and build the report."""
    start = time.time()
    patterns = parse_templates(template_path)
    system = parse_xmi(system_path)
    results = detect_patterns(patterns, system, tolerance, max_workers)
    elapsed_ms = (time.time() - start) * 1000
    total = sum(len(s) for s in results.values())
    logger.info(f"Detected {total} pattern occurrence(s) in {elapsed_ms:.1f} ms")
    return build_report(system, tolerance, results, elapsed_ms)


def run_from_config(config: Optional[DetectorConfig] = None, cfg_path: Optional[str] = None) -> DetectionReport:
    """Run a detection with the files and settings of a configuration."""
    if config is None:
        config = load_config(cfg_path) if cfg_path else load_config()
    detection = config.detection
    return run_detection(detection.template_file, detection.system_file,
                         detection.tolerance, detection.max_workers)
