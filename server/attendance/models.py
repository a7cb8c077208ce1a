from django.conf import settings
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Attendance(models.Model):
    """
    Daily presence of one student in one class, recorded by the class teacher.
    Recording the same (student, class, date) again updates the existing row.
    """
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('student')
    )
    school_class = models.ForeignKey(
        'main.SchoolClass',
        on_delete=models.CASCADE,
        related_name='attendance_records',
        verbose_name=_('class')
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='recorded_attendance',
        verbose_name=_('recorded by')
    )
    date = models.DateField(verbose_name=_('date'))
    is_present = models.BooleanField(verbose_name=_('present'))
    remarks = models.TextField(
        blank=True,
        default='',
        verbose_name=_('remarks')
    )
    recorded_at = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('recorded at')
    )

    class Meta:
        verbose_name = _('attendance')
        verbose_name_plural = _('attendance records')
        ordering = ['-date', 'student']
        constraints = [
            UniqueConstraint(fields=['student', 'school_class', 'date'],
                             name='uniq_attendance_per_student_class_day'),
        ]

    def __str__(self):
        state = 'present' if self.is_present else 'absent'
        return f"{self.student} - {self.date} ({state})"

    @classmethod
    def record(cls, *, student, school_class, teacher, date, is_present, remarks=''):
        """Create or update the row for (student, class, date); returns (record, created)."""
        return cls.objects.update_or_create(
            student=student,
            school_class=school_class,
            date=date,
            defaults={
                'teacher': teacher,
                'is_present': is_present,
                'remarks': remarks or '',
                'recorded_at': timezone.now(),
            },
        )

    @classmethod
    def percentage_for_student(cls, student, start, end) -> float:
        """Share of present days between ``start`` and ``end`` (inclusive), 0 when nothing recorded."""
        qs = cls.objects.filter(student=student, date__gte=start, date__lte=end)
        total = qs.count()
        if not total:
            return 0.0
        present = qs.filter(is_present=True).count()
        return round(present * 100.0 / total, 2)
