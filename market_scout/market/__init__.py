"""Market pipeline: seed derivation, retrieval, scoring, decisions and watches."""
