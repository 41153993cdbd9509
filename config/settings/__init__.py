"""Settings modules: ``base`` plus ``dev``, ``test`` and ``prod`` overrides."""
