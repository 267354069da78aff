"""Lawn Area Estimation Pipeline.

Estimates the vegetated area of a property from an aerial image of a
geographic viewport: resolves the viewport to a ground scale, fetches
static imagery, classifies vegetation pixels by colour, and converts the
classified fraction into square feet and square metres.
"""

__version__ = "0.1.0"
