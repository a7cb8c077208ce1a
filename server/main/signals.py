from django.db.models import Sum
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from main.common.audit import log_action
from main.models import Content, Question, Quiz


def _sync_total_points(quiz_id):
    total = Question.objects.filter(quiz_id=quiz_id).aggregate(total=Sum("points"))["total"] or 0
    # update() so a quiz already removed by a cascade is silently skipped
    Quiz.objects.filter(pk=quiz_id).update(total_points=total)


@receiver(post_save, sender=Question)
def question_saved(sender, instance, **kwargs):
    _sync_total_points(instance.quiz_id)


@receiver(post_delete, sender=Question)
def question_deleted(sender, instance, **kwargs):
    _sync_total_points(instance.quiz_id)


@receiver(post_delete, sender=Content)
def content_deleted(sender, instance, **kwargs):
    log_action("delete_content", instance, content_type=instance.content_type)
