"""Synchronization of localized pages with their default-language pages.

This package provides the primitives for:
- Front-matter store: the baseline commit and drift status kept in each page
- Drift classification: comparing a page's baseline with git history
- Batch checking: running the classifier over target paths and aggregating results
"""
