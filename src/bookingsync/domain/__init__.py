"""Domain layer: calendar reconciliation, ports and orchestration."""
