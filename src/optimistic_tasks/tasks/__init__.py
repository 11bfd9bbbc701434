"""
Task subsystem.

Components:
- task_models.py: data structures (Task, PendingOperation, filters/sorts)
- task_store.py: authoritative in-memory store of server-confirmed tasks
- overlay.py: pure projection of in-flight operations onto the store snapshot
- reconciler.py: optimistic mutations + remote reconciliation
- recompute.py: background filter/sort pipeline with supersession
- remote.py: simulated latency-bearing, failure-prone remote service
- engine.py: facade used by the rest of the app
"""
