"""medtriage — healthcare error triage, enrichment, and escalation."""
