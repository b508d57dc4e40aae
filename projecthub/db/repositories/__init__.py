"""
Per-domain repository modules for database access.

Each module exposes plain functions taking a SQLAlchemy ``Session`` as their
first argument. Functions commit unless called with ``commit=False``, which
lets a service compose several writes into one transaction.
"""
