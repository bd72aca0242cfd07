"""
Configuration runtime — lue depuis l'environnement au chargement du module.
"""
import os

# Profondeur max d'un arbre de blocs (blocs racine = profondeur 1)
MAX_BLOCK_DEPTH = int(os.getenv("LEADPAGES_MAX_BLOCK_DEPTH", "20"))

# Délai de feedback visuel avant l'auto-avance d'une carte (secondes)
AUTO_ADVANCE_DELAY = float(os.getenv("LEADPAGES_AUTO_ADVANCE_DELAY", "0.3"))

# Timeouts réseau (secondes)
SUBMIT_TIMEOUT    = float(os.getenv("LEADPAGES_SUBMIT_TIMEOUT", "15"))
ANALYTICS_TIMEOUT = float(os.getenv("LEADPAGES_ANALYTICS_TIMEOUT", "3"))

# Endpoints des collaborateurs externes
LEADPAGES_SUBMIT_URL    = os.getenv("LEADPAGES_SUBMIT_URL", "http://localhost:8001/api/submissions")
LEADPAGES_ANALYTICS_URL = os.getenv("LEADPAGES_ANALYTICS_URL", "http://localhost:8001/api/analytics/track")
