"""External collaborators: notification delivery and location lookup."""
