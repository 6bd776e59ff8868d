"""Infrastructure Layer — DB sessions, repository implementations and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/ Protocols; core/ never imports from here
    - SQLAlchemy exceptions are mapped to DatabaseError at the session boundary
"""
