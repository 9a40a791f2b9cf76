"""Domain layer: value objects, pure text rules and exceptions."""
