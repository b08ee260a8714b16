"""
Django admin registrations for the clinic models.

Superusers can inspect users, their role/permission links, tokens,
appointments and the reference tables at ``/admin/``.  Role and
permission links edited here bypass the session push, so affected users
see the change at their next sign-in.
"""

from django.contrib import admin

from .models import (
    Appointment,
    Department,
    Facility,
    Fee,
    Hospital,
    MedicationForm,
    Membership,
    MembershipSubscription,
    OAuthAccount,
    Permission,
    PharmaBrand,
    PharmaCode,
    PharmaManufacturer,
    PharmaSalt,
    Role,
    RolePermission,
    Speciality,
    TimeSlot,
    Token,
    Transaction,
    User,
    UserRole,
)


class UserRoleInline(admin.TabularInline):
    model = UserRole
    extra = 0


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 0


class TimeSlotInline(admin.TabularInline):
    model = TimeSlot
    extra = 0


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'city', 'has_oauth', 'email_verified', 'is_staff', 'created_at')
    list_filter = ('has_oauth', 'is_staff', 'gender')
    search_fields = ('email', 'name', 'city', 'phone')
    exclude = ('password', 'user_permissions', 'groups')
    inlines = [UserRoleInline, TimeSlotInline]


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'created_at')
    search_fields = ('name',)
    inlines = [RolePermissionInline]


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'created_at')
    search_fields = ('name',)


@admin.register(Token)
class TokenAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'expires', 'created_at')
    search_fields = ('user__email',)


@admin.register(OAuthAccount)
class OAuthAccountAdmin(admin.ModelAdmin):
    list_display = ('user', 'provider', 'provider_account_id', 'created_at')
    list_filter = ('provider',)
    exclude = ('access_token',)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'doctor', 'patient', 'date', 'time_slot', 'status')
    list_filter = ('status', 'is_referred')
    search_fields = ('name', 'email', 'doctor__email', 'patient__email')
    date_hierarchy = 'date'


class FeeInline(admin.TabularInline):
    model = Fee
    extra = 0


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'created_at')
    search_fields = ('name',)
    inlines = [FeeInline]


@admin.register(MembershipSubscription)
class MembershipSubscriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'membership', 'fee', 'status', 'created_at')
    list_filter = ('status', 'membership')


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'subscription', 'amount', 'method', 'status', 'expires_at', 'created_at')
    list_filter = ('method', 'status')


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'city', 'is_affiliated')
    list_filter = ('is_affiliated', 'city')
    search_fields = ('name', 'city', 'email')


@admin.register(PharmaCode)
class PharmaCodeAdmin(admin.ModelAdmin):
    list_display = ('code', 'frequency', 'created_at')
    search_fields = ('code', 'description')


for model in (Department, Facility, MedicationForm, PharmaBrand, PharmaSalt, PharmaManufacturer, Speciality):
    admin.site.register(model, list_display=('id', 'name', 'created_at'), search_fields=('name',))
