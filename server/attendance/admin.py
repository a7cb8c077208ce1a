from django.contrib import admin

from .models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("student", "school_class", "date", "is_present", "teacher")
    list_filter = ("is_present", "school_class", "date")
    search_fields = ("student__username", "student__first_name", "student__last_name")
    date_hierarchy = "date"
