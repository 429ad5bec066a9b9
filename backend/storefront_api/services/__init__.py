"""Application services: trash core, catalog domain services, CRUD helpers."""
