"""Domain layer: enums, exceptions, value objects and entities."""
