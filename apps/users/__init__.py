"""Users app package.

Defines the custom user model with roles (customer, staff, admin) and the
customer's loyalty tier. Use ``apps.users.models.CustomUser`` as the
AUTH_USER_MODEL throughout the project.
"""
