"""GTM Diagnostic Server.

Scores the Brand-to-GTM OS questionnaire into five pillar scores, an alignment
band and a primary constraint, then renders email copy and a versioned report.
"""

__version__ = "0.1.0"
