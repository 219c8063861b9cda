"""Per-stage resolvers: movement, predictions, combat, skills, alliances, deaths."""
