"""Job registration against a scheduling engine."""
