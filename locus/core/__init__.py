"""Core building blocks for locus."""
