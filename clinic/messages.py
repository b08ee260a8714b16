"""
User facing messages returned by actions as ``{success, message}``.

Each message can be overridden with an environment variable named
after its key, e.g. ``INVALID_INPUTS="Please check the form"``.
"""
from __future__ import annotations

import os


def env(key: str, default: str) -> str:
    return os.getenv(key) or default


class SYSTEM:
    BAD_REQUEST = env('BAD_REQUEST_MESSAGE', '⚠️ 400 Bad request!')
    INVALID_INPUTS = env('INVALID_INPUTS', '⚠️ Invalid inputs!')
    DATABASE_UNAVAILABLE = env('DATABASE_UNAVAILABLE', '⚠️ Failed to reach the database!')
    SERVER_ERROR = env('SERVER_ERROR_MESSAGE', '⚠️ Something went wrong!')
    UNIQUE_ERROR = env('UNIQUE_ERR', '⚠️ Record already exists!')


class DATABASE:
    UPDATED = env('DATABASE_UPDATED', '🎉 Database updated successfully')


class AUTH:
    INVALID_CREDENTIALS = env('INVALID_CREDENTIALS', '⚠️ Invalid email or password!')
    LOGGED_IN = env('LOGGED_IN', '🎉 Logged in successfully.')
    LOGGED_OUT = env('LOGGED_OUT', '🎉 Logged out successfully.')
    OAUTH_FAILED = env('OAUTH_FAILED', '⚠️ Could not sign in with the identity provider!')
    PASSWORD_UPDATED = env('PASSWORD_UPDATED', '🎉 Password updated successfully.')
    TOKEN_EXPIRED = env('TOKEN_EXPIRED', '⚠️ Token has expired!')
    TOKEN_NOT_FOUND = env('TOKEN_NOT_FOUND', "⚠️ Token doesn't exist!")
    UNAUTHORIZED = env('UN_AUTHORIZED', '⚠️ You are not authorized to perform this action!')


class USER:
    BULK_DELETED = env('BULK_DELETED', '🎉 Users deleted successfully.')
    CONFIRM_EMAIL = env('CONFIRM_EMAIL', '🎉 Confirmation email sent.')
    DELETED = env('USER_DELETED', '🎉 User deleted successfully.')
    DOCTOR_ADDED = env('DOCTOR_ADDED', '🎉 Doctor added, a confirmation email was sent.')
    EMAIL_BOUNCED = env('EMAIL_BOUNCED', '⚠️ Email address not found!')
    EMAIL_NOT_FOUND = env('EMAIL_NOT_FOUND', "⚠️ Email doesn't exist!")
    EMAIL_REGISTERED = env('EMAIL_REGISTERED', '⚠️ Email already registered!')
    EMAIL_VERIFIED = env('EMAIL_VERIFIED', '🎉 Email verified successfully.')
    NOT_FOUND = env('USER_NOT_FOUND', '⚠️ User does not exist!')
    PROFILE_UPDATED = env('PROFILE_UPDATED', '🎉 Profile updated successfully.')


class ROLE:
    ADDED = env('ROLE_ADDED', '🎉 Role added successfully!')
    ASSIGNED = env('ROLES_ASSIGNED', '🎉 Roles are assigned successfully.')
    NOT_FOUND = env('ROLE_NOT_FOUND', '⚠️ Role does not exist!')


class PERMISSION:
    ADDED = env('PERMISSION_ADDED', '🎉 Permission added successfully.')
    ASSIGNED = env('PERMISSIONS_ASSIGNED', '🎉 All permissions are assigned successfully.')


class APPOINTMENT:
    ACTION_RESTRICTED = env('APPOINTMENT_ACTION_RESTRICTED', '⚠️ Appointment status can not be updated!')
    BULK_DELETED = env('APPOINTMENTS_DELETED', '🎉 Appointments deleted successfully.')
    CANCELLED = env('APPOINTMENT_CANCELLED', '💬 Appointment cancelled.')
    CONFIRMED = env('APPOINTMENT_CONFIRMED', '🎉 Appointment confirmed, you can print appointment receipt now.')
    CREATED = env(
        'APPOINTMENT_CREATED',
        '💬 We have informed the doctor about the appointment, once the doctor confirms it '
        'you will be able to get the receipt.',
    )
    DELETED = env('APPOINTMENT_DELETED', '🎉 Appointment deleted successfully.')
    EXISTS = env('APPOINTMENT_EXISTS', '⚠️ Appointment already exists!')
    INVALID_TIME_SLOT = env('INVALID_TIME_SLOT', '⚠️ Invalid time slot!')
    NOT_FOUND = env('APPOINTMENT_NOT_FOUND', '⚠️ No details found for the current appointment!')
    UPDATED = env('APPOINTMENT_UPDATED', '🎉 Appointment updated successfully.')


class FILE:
    DELETE_FAILED = env('DELETE_FAILED', '⚠️ Failed to delete file!')
    DIRECTORY_NOT_FOUND = env('DIRECTORY_NOT_FOUND', '⚠️ Upload directory not found!')
    INVALID_FORMAT = env('INVALID_IMAGE_FORMAT', '⚠️ File format is not valid!')
    NOT_FOUND = env('IMAGE_NOT_FOUND', '⚠️ File does not exist!')
    PERMISSION_DENIED = env('PERMISSION_DENIED', '⚠️ Permission denied while saving file!')
    REMOVED = env('FILE_REMOVED', '🎉 File removed successfully.')
    SPACE_FULL = env('SPACE_FULL', '⚠️ No space left on device!')
    TOO_LARGE = env('FILE_TOO_LARGE', '⚠️ File is too large!')
    UPLOADED = env('FILE_UPLOADED', '🎉 File uploaded successfully.')


class SMTP:
    AUTH_FAILED = env('SMTP_AUTH_FAILED', '⚠️ Authentication failed with SMTP server!')
    CONNECT_FAILED = env('SMTP_CONNECT_FAILED', '⚠️ Could not connect to SMTP server!')
    TIMEOUT = env('SMTP_TIMEOUT_MESSAGE', '⚠️ SMTP connection timed out!')


class MEMBERSHIP:
    ADDED = env('MEMBERSHIP_ADDED', '🎉 Membership added successfully')
    BULK_DELETED = env('MEMBERSHIPS_DELETED', '🎉 Memberships deleted successfully.')
    DELETED = env('MEMBERSHIP_DELETED', '🎉 Membership deleted successfully.')
    UPDATED = env('MEMBERSHIP_UPDATED', '🎉 Membership updated successfully')


class SUBSCRIPTION:
    ADDED = env('MEMBERSHIP_SUBSCRIPTION_ADDED', '🎉 Membership subscription added successfully')
    BULK_DELETED = env('MEMBERSHIP_SUBSCRIPTIONS_DELETED', '🎉 Membership subscriptions deleted successfully.')
    DELETED = env('MEMBERSHIP_SUBSCRIPTION_DELETED', '🎉 Membership subscription deleted successfully.')
    PAID = env('PAYMENT_PROCESSED', '🎉 Payment processed successfully.')


def crud(prefix: str, label: str):
    """Build the add/update/delete/bulk-delete messages for a directory table."""
    class _Messages:
        ADDED = env(f'{prefix}_ADDED', f'🎉 {label} added successfully')
        UPDATED = env(f'{prefix}_UPDATED', f'🎉 {label} updated successfully')
        DELETED = env(f'{prefix}_DELETED', f'🎉 {label} deleted successfully.')
        BULK_DELETED = env(f'{prefix}S_DELETED', f'🎉 {label} entries deleted successfully.')
    _Messages.__name__ = prefix
    return _Messages


HOSPITAL = crud('HOSPITAL', 'Hospital')
DEPARTMENT = crud('DEPARTMENT', 'Department')
FACILITY = crud('FACILITY', 'Facility')
SPECIALITY = crud('SPECIALITY', 'Speciality')
MEDICATION_FORM = crud('MEDICATION_FORM', 'Medication form')
PHARMA_BRAND = crud('PHARMA_BRAND', 'Pharma brand')
PHARMA_CODE = crud('PHARMA_CODE', 'Pharma code')
PHARMA_SALT = crud('PHARMA_SALT', 'Pharma salt')
PHARMA_MANUFACTURER = crud('PHARMA_MANUFACTURER', 'Pharma manufacturer')
