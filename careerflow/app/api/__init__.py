"""HTTP API package.

Routers live in `api.routes`, business logic they delegate to in
`api.routes.route_logic`, and shared FastAPI dependencies in
`api.dependencies`. Authentication is the JWT cookie (or bearer token)
scheme from `app.core.auth`.

"""
