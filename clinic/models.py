"""
Database models for the clinic administration app.

These models capture identity and access control (users, roles,
permissions and their join rows), verification tokens, doctor
scheduling and appointments, the hospital/department directories,
pharmacy reference data and membership subscriptions.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """Manager for the email-keyed user model."""
    use_in_migrations = True

    @classmethod
    def normalize_email(cls, email):
        return (email or '').strip().lower()

    def get_by_natural_key(self, email):
        return self.get(email__iexact=email)

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('email is required')
        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Identity record keyed by a unique email.

    ``password`` is unusable for accounts that only ever signed in
    through an external identity provider (``has_oauth``).  Roles are
    attached through :class:`UserRole`; the role and permission sets
    are copied into the session token at sign-in.
    """
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]
    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True, null=True)
    # Stored file names produced by the upload endpoints
    bio = models.CharField(max_length=255, blank=True, null=True)
    image = models.CharField(max_length=512, blank=True, null=True)
    cover = models.CharField(max_length=255, blank=True, null=True)
    experience = models.PositiveIntegerField(null=True, blank=True)
    days_of_visit = models.JSONField(default=list, blank=True)
    specialities = models.ManyToManyField('Speciality', related_name='doctors', blank=True)
    has_oauth = models.BooleanField(default=False)
    email_verified = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS: list[str] = []

    objects = UserManager()

    def save(self, *args, **kwargs):
        # emails are matched case-insensitively; store one canonical form
        self.email = User.objects.normalize_email(self.email)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name or self.email} <{self.email}>"


class Role(models.Model):
    """Named permission bundle (admin, user, doctor ...)."""
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class Permission(models.Model):
    """Named capability string such as ``view:dashboard``."""
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class UserRole(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='user_roles')
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='user_roles')

    class Meta:
        unique_together = [('user', 'role')]

    def __str__(self) -> str:
        return f"{self.user_id} -> {self.role_id}"


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='role_permissions')
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE, related_name='role_permissions')

    class Meta:
        unique_together = [('role', 'permission')]

    def __str__(self) -> str:
        return f"{self.role_id} -> {self.permission_id}"


class Token(models.Model):
    """Single-use verification token; the id is what goes into emailed links.

    ``user`` is one-to-one so a user can never hold two live tokens.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='verification_token')
    expires = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"token {self.id} for {self.user_id}"


class StoredFile(models.Model):
    """Who stored a file through the upload endpoint."""
    name = models.CharField(max_length=255, unique=True)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='stored_files')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class OAuthAccount(models.Model):
    """Links a local user to an external identity provider account."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='accounts')
    provider = models.CharField(max_length=32)
    provider_account_id = models.CharField(max_length=128)
    access_token = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('provider', 'provider_account_id')]

    def __str__(self) -> str:
        return f"{self.provider}:{self.provider_account_id} -> {self.user_id}"


# ---------------------------------------------------------------------------
# Doctors & appointments
# ---------------------------------------------------------------------------

class Speciality(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class TimeSlot(models.Model):
    """A recurring visiting time offered by a doctor."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='timings')
    time = models.TimeField()
    duration = models.PositiveIntegerField(default=30, help_text='minutes')

    class Meta:
        ordering = ['time']

    def __str__(self) -> str:
        return f"{self.time:%H:%M} ({self.duration}m)"


class Appointment(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_CONFIRMED, 'confirmed'),
        (STATUS_CANCELLED, 'cancelled'),
    )

    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_appointments')
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_appointments')
    time_slot = models.ForeignKey(TimeSlot, null=True, on_delete=models.SET_NULL, related_name='appointments')
    date = models.DateField(db_index=True)
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    city = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    is_referred = models.BooleanField(default=False)
    # Stored report file names
    reports = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'date']),
            models.Index(fields=['patient', 'date']),
        ]

    def __str__(self) -> str:
        return f"appointment d={self.doctor_id} p={self.patient_id} {self.date}"


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------

class ReferenceEntry(models.Model):
    """Shared shape of the name/description lookup tables."""
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Hospital(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    city = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=512, blank=True)
    is_affiliated = models.BooleanField(default=False)
    doctors = models.ManyToManyField(User, related_name='hospitals', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Department(ReferenceEntry):
    pass


class Facility(ReferenceEntry):
    departments = models.ManyToManyField(Department, related_name='facilities', blank=True)


class MedicationForm(ReferenceEntry):
    pass


class PharmaBrand(ReferenceEntry):
    pass


class PharmaSalt(ReferenceEntry):
    pass


class PharmaManufacturer(ReferenceEntry):
    pass


class PharmaCode(models.Model):
    code = models.CharField(max_length=64, unique=True)
    description = models.TextField(blank=True, default='')
    frequency = models.CharField(max_length=64, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['code']

    def __str__(self) -> str:
        return self.code


# ---------------------------------------------------------------------------
# Memberships
# ---------------------------------------------------------------------------

class Membership(models.Model):
    name = models.CharField(max_length=255, unique=True)
    perks = models.JSONField(default=list, blank=True)
    hospitals = models.ManyToManyField(Hospital, related_name='memberships', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Fee(models.Model):
    RENEWAL_MONTHLY = 'monthly'
    RENEWAL_YEARLY = 'yearly'
    RENEWAL_CHOICES = ((RENEWAL_MONTHLY, 'monthly'), (RENEWAL_YEARLY, 'yearly'))

    membership = models.ForeignKey(Membership, on_delete=models.CASCADE, related_name='fees')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    renewal_type = models.CharField(max_length=16, choices=RENEWAL_CHOICES, default=RENEWAL_MONTHLY)

    def __str__(self) -> str:
        return f"{self.amount} / {self.renewal_type}"


class MembershipSubscription(models.Model):
    """A user's (single) membership subscription."""
    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_CHOICES = ((STATUS_PENDING, 'pending'), (STATUS_ACTIVE, 'active'))

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='subscription')
    membership = models.ForeignKey(Membership, on_delete=models.CASCADE, related_name='subscriptions')
    fee = models.ForeignKey(Fee, on_delete=models.PROTECT, related_name='subscriptions')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user_id} in {self.membership_id} ({self.status})"


class Transaction(models.Model):
    METHOD_CHOICES = (('cash', 'cash'), ('card', 'card'))
    STATUS_CHOICES = (('pending', 'pending'), ('completed', 'completed'), ('failed', 'failed'))

    subscription = models.ForeignKey(MembershipSubscription, on_delete=models.CASCADE, related_name='transactions')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(max_length=16, choices=METHOD_CHOICES, default='cash')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending')
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"txn {self.id} {self.amount} ({self.status})"
