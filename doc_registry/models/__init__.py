"""Models package: ORM tables, API contracts and enums."""
