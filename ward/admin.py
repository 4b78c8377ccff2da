"""
Django admin registrations for the ward models.

Lifecycle state should be changed through the API so that room and
patient rows stay consistent; the admin is mainly for inspection.  The
activity log is read-only.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import ActivityLog, LaborRoom, MessageTemplate, Patient, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'role', 'is_active')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'email')
    fieldsets = BaseUserAdmin.fieldsets + (('Ward', {'fields': ('role',)}),)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'status', 'assigned_nurse', 'labor_room', 'registered_at', 'delivered_at')
    list_filter = ('status', 'baby_gender')
    search_fields = ('full_name', 'next_of_kin_name', 'next_of_kin_phone')
    readonly_fields = ('status', 'assigned_nurse', 'labor_room', 'delivered_at', 'baby_gender')


@admin.register(LaborRoom)
class LaborRoomAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_occupied', 'assigned_nurse', 'current_patient')
    list_filter = ('is_occupied',)
    readonly_fields = ('is_occupied', 'current_patient')


@admin.register(MessageTemplate)
class MessageTemplateAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_active', 'created_by', 'updated_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'content')


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'user_name', 'patient', 'details')
    list_filter = ('action',)
    search_fields = ('details', 'user_name')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
