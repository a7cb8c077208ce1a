from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
import logging

from main.models import User

logger = logging.getLogger(__name__)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Customizes JWT default Serializer to add more information about user"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        token['username'] = user.username
        token['email'] = user.email
        token['first_name'] = user.first_name
        token['last_name'] = user.last_name
        # Safely access image URL
        token['image'] = user.image.url if user.image else None
        token['role'] = user.role
        return token


class UserSerializer(serializers.ModelSerializer):
    """Current user profile (GET/PATCH ``auth/users/me/``)."""
    image = serializers.ImageField(required=False, allow_null=True, allow_empty_file=True)
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'full_name', 'email',
                  'role', 'phone', 'image', 'bio', 'grade', 'section', 'roll_number',
                  'admission_no', 'guardian_name', 'guardian_mobile', 'address', 'teacher_id']
        read_only_fields = ['id', 'username', 'role', 'roll_number', 'admission_no', 'teacher_id']


class SessionLoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs['username'],
            password=attrs['password'],
        )
        if user is None:
            logger.info("Failed session login for %s", attrs['username'])
            raise serializers.ValidationError(_("Invalid username or password."))
        attrs['user'] = user
        return attrs


class PasswordResetSerializer(serializers.Serializer):
    password = serializers.CharField(write_only=True, min_length=6)

    def validate_password(self, value):
        validate_password(value)
        return value
