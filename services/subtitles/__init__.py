"""Caption subtitle compilation.

This package handles:
- Resolving caller styles against the defaults table
- Scaling fonts and anchoring caption lines to the real video resolution
- Building and validating the ASS document burned in by libass
"""

__version__ = "1.0.0"
