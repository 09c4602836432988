"""
Casedesk: multi-provider AI routing and media transcoding for support cases.
"""
__version__ = "1.0.0"
