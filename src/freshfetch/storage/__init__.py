"""File-system persistence for fetched artifacts."""
