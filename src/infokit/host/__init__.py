"""Host collaborators: the async command interface and its local implementation."""
