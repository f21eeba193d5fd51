"""Paths to the switchgear case study inputs."""

from pathlib import Path

HERE = Path(__file__).parent

INSTANCES = HERE / "switchgear.xml"
DESCRIPTIONS = HERE / "switchgear-rdfs-augmented.xml"
