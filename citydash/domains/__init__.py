"""Per-domain generators: weather, air quality and transport."""
