"""Application layer: lifecycle ports and the cacheability analyzer.

Depends on domain only.
"""
