"""Event-triggered entry points."""
