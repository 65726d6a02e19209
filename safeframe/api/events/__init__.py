"""Push delivery resources for storage and message events."""
