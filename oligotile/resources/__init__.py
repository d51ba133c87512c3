"""Genome annotation resources."""

from .regions import Region, RegionLookup, load_region_lookup

__all__ = ["Region", "RegionLookup", "load_region_lookup"]
