"""Infrastructure: SQL persistence, Redis messaging and JWT security."""
