"""Command-line interface for BoldDesk (``bolddesk``)."""
