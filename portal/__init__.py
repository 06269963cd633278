"""Study-abroad consultancy portal client."""

__version__ = "1.0.0"
