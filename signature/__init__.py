"""
Signature stamping feature.

Places a PNG/JPEG signature image onto the pages of one or more documents,
either at a position dragged on a preview or at a fixed page corner, and
returns one signed PDF or an archive of signed PDFs.
"""
