"""
Utilities Package

Helper functions used across the application.

- dates.py: Timezone-aware "now" and normalization of stored timestamps
"""
