"""
Batch orchestration.

Keeps the user-ordered working set of normalized documents and drives the
pipeline: concurrent normalization of new sources (committed all-or-nothing),
then sequential merge, stamping or compression handed to an output sink.
"""
