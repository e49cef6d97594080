"""Business operations of the dashboard service."""
