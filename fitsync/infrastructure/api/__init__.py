"""HTTP client and endpoint functions for the remote API."""
