"""WBS code allocation, generation, validation and reconciliation."""
