"""Users app package.

Defines the custom user model with marketplace roles (renter, owner,
admin). Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL
throughout the project.
"""
