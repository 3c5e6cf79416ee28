"""Test session setup: keep the audit log in memory."""
import os

os.environ["PDFWB_DATABASE__LOGGING"] = ":memory:"
