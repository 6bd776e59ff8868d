"""Services Layer — async orchestration of the loan synchronization engine.

Invariants:
    - Services depend on core/ Protocols only, never on SQLAlchemy directly
    - Base currency is injected, never read from settings inside a service

Design Decisions:
    - One component per file: synchronizer, propagator, recalculator
    - loan_sync.build_loan_sync wires the SQL implementations for one DB session
"""
