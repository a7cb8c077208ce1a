from django.contrib.auth import get_user_model

from main.models import ClassEnrollment, ClassTeacher, Content, Question, Quiz, SchoolClass, Subject


def create_test_user(role="admin", **kwargs):
    """Helper function to create a test user with the given role."""
    username = kwargs.pop('username', f'test_{role}')
    user_data = {
        'username': username,
        'email': f'{username}@example.com',
        'password': 'testpass123',
        'first_name': f'Test {role.title()}',
        'last_name': 'User',
        'role': role,
        'is_active': True,
    }
    user_data.update(kwargs)
    return get_user_model().objects.create_user(**user_data)


def create_class(name="Grade 7", grade=7, section="A", class_teacher=None, students=()):
    school_class = SchoolClass.objects.create(name=name, grade=grade, section=section)
    if class_teacher is not None:
        ClassTeacher.objects.create(school_class=school_class, teacher=class_teacher)
    for student in students:
        ClassEnrollment.objects.create(school_class=school_class, student=student)
    return school_class


def create_quiz(school_class, author=None, questions=(), status=Content.PUBLISHED,
                title="Fractions check", subject=None):
    """
    Create a quiz content row, its quiz and questions. Each question is given as
    ``(points, options)``; options default to four with the second one correct.
    """
    subject = subject or Subject.objects.get_or_create(name="Mathematics")[0]
    content = Content.objects.create(
        title=title,
        content_type=Content.QUIZ,
        school_class=school_class,
        subject=subject,
        author=author,
        status=status,
    )
    quiz = Quiz.objects.create(content=content, time_limit=30, passing_score=50)
    for order, (points, options) in enumerate(questions):
        Question.objects.create(
            quiz=quiz,
            text=f"Question {order + 1}",
            options=options if options is not None else default_options(),
            points=points,
            order=order,
        )
    quiz.refresh_from_db()
    return quiz


def default_options(correct=2):
    return [{"text": f"Choice {n}", "isCorrect": n == correct} for n in range(1, 5)]
