import re

from rest_framework import serializers
from .models import Party, PartyTransaction

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class PartySerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=200, error_messages={
        'required': 'Party name is required',
        'blank': 'Party name is required',
        'null': 'Party name is required',
    })
    email = serializers.CharField(max_length=254, required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Party
        fields = [
            'id', 'name', 'phone', 'email', 'address', 'balance', 'credit_limit',
            'total_orders', 'total_payments', 'created_at', 'updated_at'
        ]
        read_only_fields = ['balance', 'total_orders', 'total_payments', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Party name is required')
        return value

    def validate_email(self, value):
        value = (value or '').strip()
        if value and not EMAIL_RE.match(value):
            raise serializers.ValidationError('Invalid email format')
        return value

    def validate_phone(self, value):
        return (value or '').strip()

    def validate_address(self, value):
        return (value or '').strip()


class PartyTransactionSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.name', read_only=True)
    party_id = serializers.IntegerField(read_only=True)
    job_sheet_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = PartyTransaction
        fields = [
            'id', 'party_id', 'party_name', 'type', 'amount', 'description', 'balance_after',
            'job_sheet_id', 'created_by', 'is_deleted', 'deletion_reason', 'deleted_by',
            'deleted_at', 'created_at'
        ]
        read_only_fields = fields
