"""
Static routing and authorization tables.

``ROUTE_PERMISSIONS`` is the declarative policy consulted by the route
guard on every page request: an ordered list of ``(path, permission)``
pairs where more specific paths come before their parents, so the
first entry whose path is a prefix of the request path decides.
"""
from __future__ import annotations

HOME = '/'
LOGIN = '/login'
SIGNUP = '/signup'
DASHBOARD = '/dashboard'
FORGET = '/forget'
VERIFY = '/verify'
AUTH_ERROR = '/auth-error'
CREATE_PASSWORD = '/create-password'

PUBLIC_ROUTES = frozenset({
    HOME,
    '/seed',
    LOGIN,
    '/error',
    SIGNUP,
    VERIFY,
    FORGET,
    '/not-found',
    AUTH_ERROR,
    CREATE_PASSWORD,
})

# Prefixes the route guard never inspects (API actions, assets, tooling)
UNGUARDED_PREFIXES = (
    '/api/',
    '/static/',
    '/media/',
    '/admin/',
    '/metrics',
    '/healthz',
    '/swagger/',
    '/redoc/',
)
UNGUARDED_SUFFIXES = ('.png', '.ico', '.svg', '.jpg')

ROUTE_PERMISSIONS: list[tuple[str, str]] = [
    ('/doctors/add', 'add:doctor'),
    ('/doctors', 'view:doctors'),
    ('/memberships/add', 'add:membership'),
    ('/memberships', 'view:memberships'),
    ('/subscriptions/add', 'add:subscription'),
    ('/subscriptions', 'view:subscriptions'),
    ('/hospitals/add', 'add:hospital'),
    ('/hospitals', 'view:hospitals'),
    ('/departments/add', 'add:department'),
    ('/departments', 'view:departments'),
    ('/facilities/add', 'add:facility'),
    ('/facilities', 'view:facilities'),
    ('/pharma-brands/add', 'add:pharma-brand'),
    ('/pharma-brands', 'view:pharma-brands'),
    ('/pharma-codes/add', 'add:pharma-code'),
    ('/pharma-codes', 'view:pharma-codes'),
    ('/pharma-salts/add', 'add:pharma-salt'),
    ('/pharma-salts', 'view:pharma-salts'),
    ('/medication-forms/add', 'add:medication-form'),
    ('/medication-forms', 'view:medication-forms'),
    ('/pharma-manufacturers/add', 'add:pharma-manufacturer'),
    ('/pharma-manufacturers', 'view:pharma-manufacturers'),
    ('/appointments', 'view:appointments'),
    ('/specialities/add', 'add:speciality'),
    ('/specialities', 'view:specialities'),
    ('/users', 'view:users'),
    ('/roles/add', 'add:role'),
    ('/roles/assign', 'assign:roles'),
    ('/roles', 'view:roles'),
    ('/permissions/add', 'add:permission'),
    ('/permissions/assign', 'assign:permissions'),
    ('/permissions', 'view:permissions'),
    (DASHBOARD, 'view:dashboard'),
]

# Sidebar sections: (label, permission, [(label, permission, url), ...])
SIDEBAR = [
    ('Doctors', 'view:doctors', [
        ('View', 'view:doctors', '/doctors'),
        ('Add', 'add:doctor', '/doctors/add'),
    ]),
    ('Memberships', 'view:memberships', [
        ('View', 'view:memberships', '/memberships'),
        ('Add', 'add:membership', '/memberships/add'),
    ]),
    ('Subscriptions', 'view:subscriptions', [
        ('View', 'view:subscriptions', '/subscriptions'),
        ('Add', 'add:subscription', '/subscriptions/add'),
    ]),
    ('Hospitals', 'view:hospitals', [
        ('View', 'view:hospitals', '/hospitals'),
        ('Add', 'add:hospital', '/hospitals/add'),
    ]),
    ('Departments', 'view:departments', [
        ('View', 'view:departments', '/departments'),
        ('Add', 'add:department', '/departments/add'),
    ]),
    ('Facilities', 'view:facilities', [
        ('View', 'view:facilities', '/facilities'),
        ('Add', 'add:facility', '/facilities/add'),
    ]),
    ('Pharma Brands', 'view:pharma-brands', [
        ('View', 'view:pharma-brands', '/pharma-brands'),
        ('Add', 'add:pharma-brand', '/pharma-brands/add'),
    ]),
    ('Pharma Codes', 'view:pharma-codes', [
        ('View', 'view:pharma-codes', '/pharma-codes'),
        ('Add', 'add:pharma-code', '/pharma-codes/add'),
    ]),
    ('Pharma Salts', 'view:pharma-salts', [
        ('View', 'view:pharma-salts', '/pharma-salts'),
        ('Add', 'add:pharma-salt', '/pharma-salts/add'),
    ]),
    ('Medication Forms', 'view:medication-forms', [
        ('View', 'view:medication-forms', '/medication-forms'),
        ('Add', 'add:medication-form', '/medication-forms/add'),
    ]),
    ('Pharma Manufacturers', 'view:pharma-manufacturers', [
        ('View', 'view:pharma-manufacturers', '/pharma-manufacturers'),
        ('Add', 'add:pharma-manufacturer', '/pharma-manufacturers/add'),
    ]),
    ('Appointments', 'view:appointments', [
        ('View', 'view:appointments', '/appointments'),
    ]),
    ('Specialities', 'view:specialities', [
        ('View', 'view:specialities', '/specialities'),
        ('Add', 'add:speciality', '/specialities/add'),
    ]),
    ('Users', 'view:users', [
        ('View', 'view:users', '/users'),
    ]),
    ('Roles', 'view:roles', [
        ('Add', 'add:role', '/roles/add'),
        ('Assign', 'assign:roles', '/roles/assign'),
    ]),
    ('Permissions', 'view:permissions', [
        ('Add', 'add:permission', '/permissions/add'),
        ('Assign', 'assign:permissions', '/permissions/assign'),
    ]),
]

MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

DAYS = ('sunday', 'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday')


def required_permission(path: str) -> str | None:
    """Return the permission gating ``path`` or ``None`` when ungated."""
    for prefix, permission in ROUTE_PERMISSIONS:
        if path == prefix or path.startswith(prefix + '/'):
            return permission
    return None
