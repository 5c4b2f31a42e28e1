"""Market Scout: convergent vehicle-hunt agent with evidence-based candidate tiering."""

__version__ = "0.1.0"
