from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Profile


class ProfileSerializer(serializers.ModelSerializer):
    """Bank profile as shown to its owner."""

    is_payment_ready = serializers.BooleanField(read_only=True)

    class Meta:
        model = Profile
        fields = [
            'display_name',
            'email',
            'bank_code',
            'bank_account_number',
            'bank_owner_name',
            'is_payment_ready',
            'updated_at',
        ]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'created_at',
            'last_login',
            'profile',
        ]
        read_only_fields = ['id', 'email', 'created_at', 'last_login', 'profile']

    def get_profile(self, obj):
        profile = Profile.objects.filter(user=obj).first()
        if profile is None:
            return None
        return ProfileSerializer(profile).data


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Serializer for user registration."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['email', 'password', 'password_confirm', 'display_name']

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class BankInfoInputSerializer(serializers.Serializer):
    """
    Validate a bank-info submission.

    Fields:
        bank_code (str): VietQR acquirer BIN of the receiving bank
        bank_account_number (str): Receiving account number
        bank_owner_name (str): Account holder name
    """

    bank_code = serializers.CharField(max_length=20)
    bank_account_number = serializers.CharField(max_length=40)
    bank_owner_name = serializers.CharField(max_length=100)


class MemberOptionSerializer(serializers.ModelSerializer):
    """A selectable debtor."""

    id = serializers.UUIDField(source='user_id', read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'display_name', 'email']
        read_only_fields = fields
