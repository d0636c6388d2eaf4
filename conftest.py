import os

# Store settings used by the test suite.
os.environ.setdefault("SELLER_STATE_CODE", "27")
os.environ.setdefault("SELLER_GSTIN", "27AAPFU0939F1ZV")
os.environ.setdefault("SELLER_NAME", "Luminila Jewelry")
os.environ.setdefault("GSTIN_VERIFY_CHECKSUM", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
