"""Domain core – models, storage, eligibility and supporting utilities."""
