"""HTTP API over the generators and the lot store."""
