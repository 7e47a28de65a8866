"""Social-Plan: weekly availability planner with follow-based free time sharing."""

__version__ = "1.0.0"
