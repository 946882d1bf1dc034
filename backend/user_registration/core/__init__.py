"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Startup tasks (default roles, default admin account)
- db: Database configuration and connection management
- errors: Typed service errors and field errors
- security: Password hashing/policy and JWT tokens
"""
