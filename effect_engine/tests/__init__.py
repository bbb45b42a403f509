"""
Test suite for the effect reconciliation engine.

Focus areas:
- Signal batching and ordering
- Emitter snapshot semantics
- Staleness guard
- Reconciliation (start, cancel, settle, dedupe, no-restart)
- Error isolation
"""
