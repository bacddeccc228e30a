"""Firebase User Provisioning API Package.

To use the Flask app:
    from user_provisioning.flask_app import create_app

To use Firebase services:
    from user_provisioning.core.firebase import IdentityService, CredentialDirectory

To use provisioning service:
    from user_provisioning.core.provisioning_service import UserLister, UserProvisioner
"""
# Note: We don't import flask_app by default to avoid the Flask dependency
# for CLI scripts that only use user_provisioning.core
