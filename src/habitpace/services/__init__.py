"""Domain services for habitpace."""
