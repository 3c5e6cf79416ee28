"""core.contracts

Central, stable interfaces (ABCs) used as the only cross-feature public API.

- Features depend on contracts, not on concrete implementations from other features.
- This package intentionally contains only interfaces.
"""
