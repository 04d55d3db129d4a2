"""Infrastructure: cache stores and registry, SQLAlchemy persistence."""
