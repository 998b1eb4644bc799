"""AI recommendation and plant question collaborator."""
