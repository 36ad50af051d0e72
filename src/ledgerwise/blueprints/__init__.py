"""HTTP blueprints; each package exposes ``bp``."""
