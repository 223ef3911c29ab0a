"""Refresh jobs and the job catalog."""
