# bulletin_archiver/services/__init__.py
"""
Business logic services.
"""
