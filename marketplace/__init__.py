"""Real estate marketplace API."""
