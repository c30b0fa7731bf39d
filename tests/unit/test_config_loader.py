"""
Tests for the YAML configuration loader.
"""

import pytest
import yaml

from dpd.config_loader import DetectorConfig, DetectionSpec, load_config


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config == DetectorConfig()
    assert config.detection.tolerance == 0
    assert config.detection.max_workers == 1
    assert config.logging.verbose is True
    assert config.output.json_file is None


def test_load_from_yaml(tmp_path):
    path = tmp_path / "detector.yaml"
    path.write_text(yaml.safe_dump({
        "detection": {"template_file": "t.xml", "system_file": "s.xmi", "tolerance": 2, "max_workers": 4},
        "logging": {"verbose": False, "debug": True},
        "output": {"json_file": "out.json", "show_missing": False},
    }), encoding="utf-8")

    config = load_config(path)

    assert config.detection == DetectionSpec(template_file="t.xml", system_file="s.xmi", tolerance=2,
                                             max_workers=4)
    assert config.logging.debug is True
    assert config.output.json_file == "out.json"
    assert config.output.show_missing is False
    assert config.output.show_superfluous is True


def test_unknown_keys_ignored():
    config = DetectorConfig.from_dict({"detection": {"tolerance": 1, "colour": "blue"}, "extra": {}})
    assert config.detection.tolerance == 1


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == DetectorConfig()


@pytest.mark.parametrize("detection", [{"tolerance": -1}, {"max_workers": 0}])
def test_invalid_values(detection):
    with pytest.raises(ValueError):
        DetectorConfig.from_dict({"detection": detection})


def test_shipped_config(project_root):
    config = load_config(project_root / "config" / "detector.yaml")
    assert config.detection.template_file == "templates/patterns.xml"
    assert config.detection.tolerance == 0
