"""HTTP fetching and charset negotiation."""
