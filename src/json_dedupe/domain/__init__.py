"""Pure domain layer: records, validation and reconciliation."""
