"""
HTTP routers.

- users: /api/users ViewSet (CRUD + custom actions)
- health: /health liveness and readiness
- _common: pagination and response envelope helpers
"""
