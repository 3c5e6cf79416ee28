"""
Document assembly feature.

Normalizes heterogeneous sources (PDF, JPEG/PNG images, Word and Excel
documents) into page-addressable documents, keeps a per-page selection and
rotation configuration, and merges the selected pages into one PDF.
"""
