"""Validation of raw listing and booking submissions."""

from adilla.intake import booking, listing
from adilla.intake.common import split_tags
