"""Root-cause analysis context resolution service"""

__version__ = "1.0.0"
