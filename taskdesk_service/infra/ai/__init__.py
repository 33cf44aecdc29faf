"""AI infrastructure."""
