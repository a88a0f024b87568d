"""Research engine: models, checkpoints, collaborators and workflows."""
