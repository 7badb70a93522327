# =====================================================
# metrocal/__init__.py
# =====================================================
"""
Metrocal - calibration recurrence & tolerance-status engine.

Gestione strumenti di misura e delle loro scadenze di taratura.
"""

__version__ = "0.3.0"
