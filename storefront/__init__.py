"""
Storefront API: an e-commerce REST backend built on FastAPI and SQLAlchemy
"""
__version__ = "1.0.0"
