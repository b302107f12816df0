"""Well-known names shared across layers."""

# Request / response header and gRPC metadata keys.
X_REQUEST_ID = "X-Request-ID"

# Casbin roles.
ROLE_USER = "role::user"
ROLE_ADMIN = "role::admin"

# Reserved for the administrator account, which only the operator script creates.
ADMIN_USERNAME = "root"

# Upper bound on concurrent per-user queries when listing users.
MAX_FANOUT_CONCURRENCY = 10
