"""Cross-cutting helpers used by every layer: telemetry, datetimes, ids. No business logic."""
