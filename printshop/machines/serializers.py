from rest_framework import serializers

from printshop.jobsheets.models import JobSheet
from .models import Machine


class MachineSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100)

    class Meta:
        model = Machine
        fields = [
            'id', 'name', 'type', 'description', 'color_capacity', 'max_sheet_size', 'status',
            'operator_name', 'operator_email', 'is_available', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        existing = Machine.objects.filter(name__iexact=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError('Machine name already exists')
        return value


class OperatorJobSerializer(serializers.ModelSerializer):
    """Job sheet fields shown on the operator dashboards"""
    machine_id = serializers.IntegerField(read_only=True, allow_null=True)
    machine_name = serializers.CharField(source='machine.name', read_only=True, default=None)
    paper_type_name = serializers.CharField(source='paper_type.name', read_only=True, default=None)

    class Meta:
        model = JobSheet
        fields = [
            'id', 'job_date', 'party_name', 'description', 'plate', 'size', 'paper_sheet', 'imp',
            'gsm', 'paper_type_name', 'job_type', 'file_url', 'machine_id', 'machine_name',
            'job_status', 'assigned_at', 'started_at', 'completed_at', 'operator_notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields
