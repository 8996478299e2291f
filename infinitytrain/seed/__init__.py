"""Demo data seeding."""
