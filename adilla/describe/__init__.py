"""Listing description generation."""

from adilla.describe.generator import DescriptionGenerator, build_prompt
