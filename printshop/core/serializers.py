from rest_framework import serializers
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='get_display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'display_name', 'name', 'role', 'phone', 'is_active', 'is_staff', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']


class AdminLoginSerializer(serializers.Serializer):
    passcode = serializers.CharField(error_messages={'required': 'Passcode is required', 'blank': 'Passcode is required'})
