from rest_framework import serializers

from printshop.inventory.models import InventoryItem
from printshop.parties.models import Party
from .models import JobSheet, JobSheetNote, PaperType


class PaperTypeSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100, error_messages={
        'required': 'Paper type name is required',
        'blank': 'Paper type name is required',
    })

    class Meta:
        model = PaperType
        fields = ['id', 'name', 'gsm', 'created_at']
        read_only_fields = ['created_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Paper type name is required')
        if PaperType.objects.filter(name__iexact=value).exists():
            raise serializers.ValidationError('Paper type already exists')
        return value


class JobSheetSerializer(serializers.ModelSerializer):
    party_id = serializers.PrimaryKeyRelatedField(
        source='party', queryset=Party.objects.all(), required=False, allow_null=True,
        error_messages={'does_not_exist': 'Party not found'},
    )
    paper_type_id = serializers.PrimaryKeyRelatedField(
        source='paper_type', queryset=PaperType.objects.all(), required=False, allow_null=True,
        error_messages={'does_not_exist': 'Paper type not found'},
    )
    inventory_item_id = serializers.PrimaryKeyRelatedField(
        source='inventory_item', queryset=InventoryItem.objects.all(), required=False, allow_null=True,
        error_messages={'does_not_exist': 'Inventory item not found'},
    )
    machine_id = serializers.IntegerField(read_only=True, allow_null=True)
    machine_name = serializers.CharField(source='machine.name', read_only=True, default=None)
    party_balance = serializers.DecimalField(source='party.balance', max_digits=12, decimal_places=2,
                                             read_only=True, default=None)
    party_phone = serializers.CharField(source='party.phone', read_only=True, default=None)
    party_email = serializers.CharField(source='party.email', read_only=True, default=None)
    paper_type_name = serializers.CharField(source='paper_type.name', read_only=True, default=None)
    paper_type_gsm = serializers.IntegerField(source='paper_type.gsm', read_only=True, default=None)
    total_cost = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = JobSheet
        fields = [
            'id', 'job_date', 'party_id', 'party_name', 'party_balance', 'party_phone', 'party_email',
            'description', 'plate', 'size', 'sq_inch', 'paper_sheet', 'imp', 'rate', 'printing', 'uv',
            'baking', 'total_cost', 'gsm', 'paper_type_id', 'paper_type_name', 'paper_type_gsm',
            'job_type', 'file_url', 'paper_provided_by_party', 'used_from_inventory', 'inventory_item_id',
            'party_balance_before', 'party_balance_after', 'machine_id', 'machine_name', 'job_status',
            'assigned_at', 'started_at', 'completed_at', 'operator_notes', 'is_deleted', 'deletion_reason',
            'deleted_by', 'deleted_at', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'party_balance_before', 'party_balance_after', 'job_status', 'assigned_at', 'started_at',
            'completed_at', 'operator_notes', 'is_deleted', 'deletion_reason', 'deleted_by', 'deleted_at',
            'created_at', 'updated_at'
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if instance.party is not None:
            data['party_name'] = instance.party.name
        return data

    def validate(self, attrs):
        used_from_inventory = attrs.get('used_from_inventory', getattr(self.instance, 'used_from_inventory', False))
        item = attrs.get('inventory_item', getattr(self.instance, 'inventory_item', None))
        if used_from_inventory and item is None:
            raise serializers.ValidationError('Inventory item is required when paper is used from inventory')
        for field in ('printing', 'uv', 'baking'):
            if attrs.get(field) is not None and attrs[field] < 0:
                raise serializers.ValidationError({field: f"{field.capitalize()} cost cannot be negative"})
        return attrs


class JobSheetNoteSerializer(serializers.ModelSerializer):
    job_sheet_id = serializers.PrimaryKeyRelatedField(
        source='job_sheet', queryset=JobSheet.objects.filter(is_deleted=False),
        error_messages={'does_not_exist': 'Job sheet not found', 'required': 'Job sheet ID and note are required'},
    )
    note = serializers.CharField(error_messages={
        'required': 'Job sheet ID and note are required',
        'blank': 'Job sheet ID and note are required',
    })

    class Meta:
        model = JobSheetNote
        fields = ['id', 'job_sheet_id', 'note', 'author', 'created_at']
        read_only_fields = ['created_at']
