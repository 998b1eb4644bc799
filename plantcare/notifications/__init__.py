"""Care reminder notifications."""
