from rest_framework import serializers
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from .models import User


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    User registration serializer
    """
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        validators=[validate_password]
    )
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ('username', 'email', 'password', 'password_confirm', 'first_name', 'last_name',
                  'display_name', 'paypal_email', 'bio', 'avatar')
        extra_kwargs = {
            'display_name': {'required': False},
            'paypal_email': {'required': False},
            'bio': {'required': False},
            'avatar': {'required': False},
        }

    def validate(self, attrs):
        """
        Validate password confirmation
        """
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError("Passwords don't match.")
        return attrs

    def validate_email(self, value):
        """
        Validate email uniqueness
        """
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value.lower()

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError("A user with this username already exists.")
        return value

    def create(self, validated_data):
        """
        New accounts always start as clippers
        """
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User.objects.create_user(role=User.Role.CLIPPER, **validated_data)
        user.set_password(password)
        user.save()
        return user


class UserLoginSerializer(serializers.Serializer):
    """
    User login serializer
    """
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        """
        Validate user credentials
        """
        username = attrs.get('username')
        password = attrs.get('password')

        if not (username and password):
            raise serializers.ValidationError('Must provide username/email and password.')

        user = authenticate(username=username, password=password)

        # Fall back to email login
        if not user:
            user_obj = User.objects.filter(email__iexact=username).first()
            if user_obj is not None:
                user = authenticate(username=user_obj.username, password=password)

        if not user:
            raise serializers.ValidationError('Invalid credentials.')

        if not user.is_active:
            raise serializers.ValidationError('User account is disabled.')

        attrs['user'] = user
        return attrs


class UserProfileSerializer(serializers.ModelSerializer):
    """
    User profile serializer for displaying user info
    """
    is_admin = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'first_name', 'last_name', 'display_name',
                  'role', 'is_admin', 'paypal_email', 'bio', 'avatar',
                  'total_earnings', 'total_views', 'is_active', 'created_at', 'updated_at')
        read_only_fields = ('id', 'username', 'role', 'total_earnings', 'total_views',
                            'is_active', 'created_at', 'updated_at')


class PasswordChangeSerializer(serializers.Serializer):
    """
    Password change serializer
    """
    old_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(
        write_only=True,
        min_length=8,
        validators=[validate_password]
    )
    new_password_confirm = serializers.CharField(write_only=True)

    def validate_old_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Old password is incorrect.')
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError("New passwords don't match.")
        return attrs

    def save(self):
        user = self.context['request'].user
        user.set_password(self.validated_data['new_password'])
        user.save()
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    User profile update serializer
    """
    class Meta:
        model = User
        fields = ('email', 'first_name', 'last_name', 'display_name', 'paypal_email', 'bio', 'avatar')

    def validate_email(self, value):
        """
        Validate email uniqueness (exclude current user)
        """
        user = self.context['request'].user
        if User.objects.filter(email__iexact=value).exclude(id=user.id).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value.lower()


class AdminUserSerializer(serializers.ModelSerializer):
    """Admin listing of users with their activity counters."""
    submission_count = serializers.IntegerField(read_only=True, default=0)
    approved_submission_count = serializers.IntegerField(read_only=True, default=0)
    payout_request_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'display_name', 'role', 'is_active',
                  'paypal_email', 'total_earnings', 'total_views',
                  'submission_count', 'approved_submission_count', 'payout_request_count',
                  'date_joined', 'last_login')
        read_only_fields = fields


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.choices)
