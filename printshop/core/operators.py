"""
Bootstrap of the fixed dashboard / operator accounts.

Shared by `POST auth/setup-users/` and `manage.py setup_operators`.
Each configured account is created when missing and otherwise has its
profile (email, display name, role) brought in line with the config.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db import transaction

logger = logging.getLogger(__name__)

User = get_user_model()

ROLE_GROUPS = {
    'admin': 'Admin',
    'supervisor': 'Supervisor',
    'operator': 'Operator',
}


def configured_accounts():
    return list(settings.OPERATOR_ACCOUNTS)


def public_accounts():
    """Configured accounts without any password material"""
    return [
        {'username': a['username'], 'email': a['email'], 'role': a['role'], 'name': a['name']}
        for a in configured_accounts()
    ]


def ensure_role_groups():
    return {role: Group.objects.get_or_create(name=name)[0] for role, name in ROLE_GROUPS.items()}


def _apply_role(user, role, groups):
    user.role = role
    user.is_staff = role == 'admin'
    user.save()
    user.groups.remove(*[g for r, g in groups.items() if r != role])
    user.groups.add(groups[role])


def setup_account(account, groups, default_password=None):
    """Create or update one account, returning a per-account result dict"""
    email = account['email']
    role = account['role']
    if role not in ROLE_GROUPS:
        return {'email': email, 'status': 'error', 'message': f"Unknown role '{role}'"}

    with transaction.atomic():
        user = User.objects.filter(username=account['username']).first()
        if user is None:
            password = account.get('password') or default_password
            if not password:
                return {'email': email, 'status': 'error', 'message': 'No password configured for new account'}
            user = User.objects.create_user(
                username=account['username'],
                email=email,
                password=password,
                display_name=account['name'],
            )
            _apply_role(user, role, groups)
            logger.info(f"Created operator account {user.username} ({role})")
            return {'email': email, 'status': 'created', 'message': 'User created successfully', 'user_id': user.id}

        user.email = email
        user.display_name = account['name']
        user.is_active = True
        _apply_role(user, role, groups)
        logger.info(f"Updated operator account {user.username} ({role})")
        return {'email': email, 'status': 'updated', 'message': 'User metadata updated successfully', 'user_id': user.id}


def setup_accounts(accounts=None, default_password=None):
    """
    Create or update every configured account.

    Returns (results, summary) where summary counts created / updated /
    errors. One failing account never stops the others.
    """
    accounts = configured_accounts() if accounts is None else accounts
    if default_password is None:
        default_password = settings.OPERATOR_DEFAULT_PASSWORD
    groups = ensure_role_groups()

    results = []
    for account in accounts:
        try:
            results.append(setup_account(account, groups, default_password))
        except Exception as e:
            logger.error(f"Failed to set up account {account.get('username')}: {str(e)}")
            results.append({'email': account.get('email'), 'status': 'error', 'message': str(e)})

    summary = {
        'total': len(accounts),
        'created': sum(1 for r in results if r['status'] == 'created'),
        'updated': sum(1 for r in results if r['status'] == 'updated'),
        'errors': sum(1 for r in results if r['status'] == 'error'),
    }
    return results, summary
