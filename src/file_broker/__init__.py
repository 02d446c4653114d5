"""
File-operation request broker.

Accepts file CRUD requests from a sandboxed eval frame, runs them against a
file store, reconciles notebook state and reports one outcome per request.
"""
