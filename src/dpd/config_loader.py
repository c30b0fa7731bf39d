"""
Detector Configuration
Loads the YAML configuration of a detection run.
"""
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/detector.yaml"


def _known_keys(spec_class, data: Optional[Dict]) -> Dict:
    """Keep only the keys a dataclass knows about."""
    names = {f.name for f in fields(spec_class)}
    return {k: v for k, v in (data or {}).items() if k in names}


@dataclass
class DetectionSpec:
    """What to match and how tolerant to be."""
    template_file: str = "templates.xml"
    system_file: str = "input.xmi"
    tolerance: int = 0
    max_workers: int = 1

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass
class LoggingSpec:
    """Console verbosity."""
    verbose: bool = True
    debug: bool = False


@dataclass
class OutputSpec:
    """Reporting options."""
    json_file: Optional[str] = None
    show_superfluous: bool = True
    show_missing: bool = True


@dataclass
class DetectorConfig:
    """Complete configuration of a detection run."""
    detection: DetectionSpec = field(default_factory=DetectionSpec)
    logging: LoggingSpec = field(default_factory=LoggingSpec)
    output: OutputSpec = field(default_factory=OutputSpec)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'DetectorConfig':
        """Load configuration from a YAML file."""
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict) -> 'DetectorConfig':
        """Parse configuration from a dictionary. Unknown keys are ignored."""
        return cls(
            detection=DetectionSpec(**_known_keys(DetectionSpec, data.get('detection'))),
            logging=LoggingSpec(**_known_keys(LoggingSpec, data.get('logging'))),
            output=OutputSpec(**_known_keys(OutputSpec, data.get('output'))),
        )


def load_config(path: Union[str, Path, None] = DEFAULT_CONFIG_PATH) -> DetectorConfig:
    """Load the configuration at path, or the defaults when there is no such file."""
    if path is None or not Path(path).exists():
        logger.debug(f"No configuration file at {path}, using defaults")
        return DetectorConfig()
    config = DetectorConfig.from_yaml(path)
    logger.debug(f"Loaded configuration from {path}")
    return config
