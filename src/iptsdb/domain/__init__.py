"""Domain layer: value objects, entities, and services of the time-series store."""
