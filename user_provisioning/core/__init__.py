"""Core Business Logic Module

This module provides the business logic for user listing and provisioning,
independent of the HTTP framework.

Module Structure:
    - firebase/                : Firebase Authentication and Firestore adapters
    - provisioning_service.py  : UserLister and UserProvisioner
    - validators.py            : Create-user payload validation
    - timefmt.py               : IST display dates for identity timestamps
    - audit.py                 : Signed audit trail of provisioning events
    - exceptions.py            : ProvisioningError hierarchy

Usage Pattern:
    Import explicitly when needed:
        from user_provisioning.core.provisioning_service import UserLister, UserProvisioner
        from user_provisioning.core.validators import validate_create_user_payload
"""
