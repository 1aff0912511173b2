"""Bundle line construction and consolidation."""

from golf_configurator.bundles.identity import build_lines, build_submission, generate_bundle_id
from golf_configurator.bundles.metadata import parse_line
from golf_configurator.bundles.transform import consolidate

__all__ = [
    "build_lines",
    "build_submission",
    "consolidate",
    "generate_bundle_id",
    "parse_line",
]
