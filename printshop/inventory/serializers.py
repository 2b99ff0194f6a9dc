from rest_framework import serializers
from .models import InventoryItem, InventoryTransaction


class InventoryItemSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.name', read_only=True)
    party_phone = serializers.CharField(source='party.phone', read_only=True)
    available_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'party', 'party_name', 'party_phone', 'paper_type', 'paper_type_name', 'gsm',
            'current_quantity', 'reserved_quantity', 'available_quantity', 'last_updated', 'created_at'
        ]


class InventoryTransactionSerializer(serializers.ModelSerializer):
    party_name = serializers.CharField(source='party.name', read_only=True)
    paper_type_name = serializers.CharField(source='inventory_item.paper_type_name', read_only=True)

    class Meta:
        model = InventoryTransaction
        fields = [
            'id', 'inventory_item', 'party', 'party_name', 'paper_type', 'paper_type_name', 'gsm',
            'transaction_type', 'quantity', 'unit_type', 'unit_size', 'total_sheets', 'description',
            'reference_job_sheet', 'balance_after', 'created_by', 'is_deleted', 'deletion_reason',
            'deleted_by', 'deleted_at', 'created_at'
        ]


class MovementCreateSerializer(serializers.Serializer):
    """Input for POST inventory/"""
    party_id = serializers.IntegerField(error_messages={'required': 'Party ID is required', 'null': 'Party ID is required'})
    paper_type_id = serializers.IntegerField(required=False, allow_null=True)
    gsm = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    transaction_type = serializers.ChoiceField(choices=InventoryTransaction.TRANSACTION_TYPE_CHOICES, default='in',
                                               error_messages={'invalid_choice': 'Invalid transaction type'})
    quantity = serializers.IntegerField(min_value=1, error_messages={
        'required': 'Quantity is required',
        'min_value': 'Quantity must be a positive number',
        'invalid': 'Quantity must be a positive number',
    })
    unit_type = serializers.ChoiceField(choices=InventoryTransaction.UNIT_TYPE_CHOICES, default='sheets')
    unit_size = serializers.IntegerField(min_value=1, default=1, error_messages={
        'min_value': 'Unit size must be a positive number',
    })
    description = serializers.CharField(required=False, allow_blank=True, default='')
