"""
API Routers - HTTP endpoint handlers

Each router handles a specific domain of functionality:
- lists: ratings/parked/rejects reads and inserts, parked podium
- cache: one-round-trip snapshot of several lists
- recommendations: next recommendation
- config: settings, meta and menu documents
- backup: whole-store export/import
- health: liveness and diagnostics
"""
